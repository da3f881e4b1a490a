"""External vector database interface."""

from typing import Any, Protocol


class CollectionExistsError(Exception):
    """A collection with this name was created concurrently."""


class VectorDatabase(Protocol):
    """Protocol for external vector databases used by the persistent store.

    Methods are blocking; callers running on an event loop should dispatch
    them to an executor. ``where`` clauses use the Chroma filter dialect:
    ``{"field": {"$eq": value}}``, ``{"field": {"$lt": value}}`` and
    ``{"$and": [clause, ...]}``.
    """

    def has_collection(self, name: str) -> bool:
        """Check whether a collection exists.

        Args:
            name: Collection name

        Returns:
            True if the collection exists
        """
        ...

    def create_collection(self, name: str, metadata: dict[str, Any]) -> None:
        """Declare a collection.

        Args:
            name: Collection name
            metadata: Collection-level settings (distance space, description)

        Raises:
            CollectionExistsError: If the collection already exists
        """
        ...

    def add(
        self,
        collection: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadata: list[dict[str, Any]],
    ) -> None:
        """Add documents with precomputed embeddings.

        Args:
            collection: Collection name
            ids: Unique identifiers for each document
            embeddings: One vector per document
            documents: Document text
            metadata: Flat metadata per document
        """
        ...

    def query(
        self,
        collection: str,
        query_embedding: list[float],
        top_k: int = 10,
        where: dict[str, Any] | None = None,
    ) -> tuple[list[str], list[str], list[dict[str, Any]], list[float]]:
        """Nearest-neighbor search restricted by a metadata filter.

        Args:
            collection: Collection name
            query_embedding: Query vector
            top_k: Number of results to return
            where: Optional metadata filter

        Returns:
            Tuple of (ids, documents, metadatas, cosine distances), nearest first
        """
        ...

    def get(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> tuple[list[str], list[str], list[dict[str, Any]]]:
        """Fetch documents by metadata filter.

        Returns:
            Tuple of (ids, documents, metadatas)
        """
        ...

    def delete(self, collection: str, where: dict[str, Any]) -> None:
        """Bulk delete every document matching the filter."""
        ...
