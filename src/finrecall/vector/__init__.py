"""Vector indexes and database adapters for semantic search."""

from finrecall.vector.memory import IndexedDocument, InMemoryVectorIndex
from finrecall.vector.store import CollectionExistsError, VectorDatabase

try:
    from finrecall.vector.chromadb import ChromaDBDatabase
except Exception:
    ChromaDBDatabase = None  # type: ignore[assignment,misc]

__all__ = [
    "ChromaDBDatabase",
    "CollectionExistsError",
    "InMemoryVectorIndex",
    "IndexedDocument",
    "VectorDatabase",
]
