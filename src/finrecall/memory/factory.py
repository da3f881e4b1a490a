"""Factory functions wiring the memory subsystem from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from finrecall.embeddings.ollama import OllamaEmbedding
from finrecall.embeddings.openai import OpenAIEmbedding
from finrecall.memory.coordinator import ConversationMemoryCoordinator
from finrecall.memory.manager import MemoryManager
from finrecall.memory.persistent import PersistentVectorStore
from finrecall.memory.semantic import EphemeralSemanticStore
from finrecall.vector.memory import InMemoryVectorIndex

if TYPE_CHECKING:
    from finrecall.config.schema import EmbeddingsConfig, FinrecallConfig, PersistentStoreConfig
    from finrecall.embeddings.client import EmbeddingClient
    from finrecall.vector.store import VectorDatabase


def create_embedding_client(config: EmbeddingsConfig) -> EmbeddingClient:
    """Create an embedding client for the configured provider.

    Raises:
        ValueError: If the provider is not recognised.
    """
    provider = config.provider

    if provider == "openai":
        return OpenAIEmbedding(
            model=config.model,
            api_key=config.api_key,
            base_url=config.host,
            timeout=config.timeout,
        )
    elif provider == "ollama":
        return OllamaEmbedding(
            model=config.model,
            host=config.host or "http://localhost:11434",
            timeout=config.timeout,
        )
    elif provider == "sentence-transformers":
        from finrecall.embeddings.sentence_transformer import SentenceTransformerEmbedding

        return SentenceTransformerEmbedding(model_name=config.model)
    else:
        raise ValueError(f"Unknown embedding provider: {provider}")


def create_vector_database(config: PersistentStoreConfig) -> VectorDatabase:
    """Create the external vector database adapter."""
    from finrecall.vector.chromadb import ChromaDBDatabase

    return ChromaDBDatabase(
        host=config.host,
        port=config.port,
        ssl=config.ssl,
        headers=config.headers or None,
        persist_directory=config.persist_directory,
    )


def create_persistent_store(
    config: FinrecallConfig,
    embedding_client: EmbeddingClient | None = None,
    database: VectorDatabase | None = None,
) -> PersistentVectorStore:
    """Create the durable store for registered users."""
    return PersistentVectorStore(
        database=database or create_vector_database(config.persistent),
        embedding_client=embedding_client or create_embedding_client(config.embeddings),
        collection_name=config.persistent.collection_name,
        min_score=config.persistent.min_score,
        max_results=config.persistent.max_results,
    )


def create_memory_manager(
    config: FinrecallConfig,
    embedding_client: EmbeddingClient | None = None,
    database: VectorDatabase | None = None,
) -> MemoryManager:
    """Build both stores and the manager that owns them.

    Call once per process: the ephemeral index created here is the only one
    unregistered users will ever see.

    Args:
        config: finrecall configuration
        embedding_client: Override the configured embedding provider
        database: Override the configured vector database

    Returns:
        A memory manager owning a fresh ephemeral index
    """
    embedding_client = embedding_client or create_embedding_client(config.embeddings)

    ephemeral = EphemeralSemanticStore(
        embedding_client=embedding_client,
        index=InMemoryVectorIndex(),
        min_score=config.ephemeral.min_score,
        max_results=config.ephemeral.max_results,
    )
    persistent = create_persistent_store(config, embedding_client, database)

    return MemoryManager(
        ephemeral_store=ephemeral,
        persistent_store=persistent,
        search_limit=config.coordinator.search_limit,
        context_limit=config.coordinator.context_limit,
        context_min_score=config.coordinator.context_min_score,
    )


def create_coordinator(
    config: FinrecallConfig,
    manager: MemoryManager | None = None,
) -> ConversationMemoryCoordinator:
    """Create the per-turn coordinator, building a manager if none is given."""
    return ConversationMemoryCoordinator(
        manager=manager or create_memory_manager(config),
        max_messages=config.coordinator.max_messages,
        prune_max=config.coordinator.prune_max,
    )
