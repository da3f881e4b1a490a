"""Embedding provider interface."""

from typing import Protocol


class EmbeddingError(Exception):
    """The embedding provider failed to produce vectors."""


class EmbeddingClient(Protocol):
    """Protocol for embedding generation clients.

    Stores call ``embed_single`` once per write and once per query; a client
    is free to batch internally.
    """

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts, one vector per input in input order."""
        ...

    async def embed_single(self, text: str) -> list[float]:
        """Embed one text."""
        ...

    @property
    def model_name(self) -> str:
        """Name of the embedding model, for logs and collection metadata."""
        ...
