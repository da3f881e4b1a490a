"""Embedding generation for semantic search."""

from finrecall.embeddings.client import EmbeddingClient, EmbeddingError
from finrecall.embeddings.ollama import OllamaEmbedding
from finrecall.embeddings.openai import OpenAIEmbedding

__all__ = ["EmbeddingClient", "EmbeddingError", "OllamaEmbedding", "OpenAIEmbedding"]
