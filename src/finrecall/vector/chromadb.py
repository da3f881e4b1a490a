"""ChromaDB adapter for the persistent memory store."""

from pathlib import Path
from typing import Any

import chromadb

from finrecall.vector.store import CollectionExistsError


class ChromaDBDatabase:
    """Vector database backed by a ChromaDB server.

    Production deployments point ``host`` at a Chroma server. Without a host
    the client is embedded: persistent under ``persist_directory`` or purely
    in-memory when that is None too (for tests).
    """

    def __init__(
        self,
        host: str | None = None,
        port: int = 8000,
        ssl: bool = False,
        headers: dict[str, str] | None = None,
        persist_directory: str | Path | None = None,
    ):
        """Initialize the ChromaDB client.

        Args:
            host: Chroma server hostname (None = embedded client)
            port: Chroma server port
            ssl: Use HTTPS to reach the server
            headers: Extra HTTP headers, e.g. for token auth
            persist_directory: Directory for embedded persistent storage
        """
        if host:
            self.client = chromadb.HttpClient(host=host, port=port, ssl=ssl, headers=headers)
        elif persist_directory is not None:
            persist_path = Path(persist_directory).expanduser().resolve()
            persist_path.mkdir(parents=True, exist_ok=True)
            self.client = chromadb.PersistentClient(path=str(persist_path))
        else:
            self.client = chromadb.EphemeralClient()

        self._collections: dict[str, Any] = {}

    def _collection(self, name: str) -> Any:
        if name not in self._collections:
            self._collections[name] = self.client.get_collection(name=name)
        return self._collections[name]

    def has_collection(self, name: str) -> bool:
        """Check whether a collection exists."""
        # Depending on the chromadb release this lists names or Collection objects
        names = {getattr(c, "name", c) for c in self.client.list_collections()}
        return name in names

    def create_collection(self, name: str, metadata: dict[str, Any]) -> None:
        """Create a collection.

        Raises:
            CollectionExistsError: If another writer created it first
        """
        try:
            self._collections[name] = self.client.create_collection(name=name, metadata=metadata)
        except Exception as e:
            if "already exists" in str(e).lower():
                raise CollectionExistsError(name) from e
            raise

    def add(
        self,
        collection: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadata: list[dict[str, Any]],
    ) -> None:
        """Add documents with precomputed embeddings."""
        if not ids:
            return

        self._collection(collection).add(
            ids=ids,
            embeddings=embeddings,  # type: ignore[arg-type]
            documents=documents,
            metadatas=metadata,  # type: ignore[arg-type]
        )

    def query(
        self,
        collection: str,
        query_embedding: list[float],
        top_k: int = 10,
        where: dict[str, Any] | None = None,
    ) -> tuple[list[str], list[str], list[dict[str, Any]], list[float]]:
        """Nearest-neighbor search restricted by a metadata filter."""
        results = self._collection(collection).query(
            query_embeddings=[query_embedding],  # type: ignore[arg-type]
            n_results=top_k,
            where=where or None,
        )

        # ChromaDB returns results in a batched format
        ids = results["ids"][0] if results["ids"] else []
        documents = results["documents"][0] if results["documents"] else []
        metadatas = results["metadatas"][0] if results["metadatas"] else []
        distances = results["distances"][0] if results["distances"] else []

        return ids, documents, metadatas, distances  # type: ignore[return-value]

    def get(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> tuple[list[str], list[str], list[dict[str, Any]]]:
        """Fetch documents by metadata filter."""
        results = self._collection(collection).get(where=where or None, limit=limit)

        ids = results["ids"] if results["ids"] else []
        documents = results["documents"] if results["documents"] else []
        metadatas = results["metadatas"] if results["metadatas"] else []

        return ids, documents, metadatas  # type: ignore[return-value]

    def delete(self, collection: str, where: dict[str, Any]) -> None:
        """Bulk delete every document matching the filter."""
        self._collection(collection).delete(where=where)
