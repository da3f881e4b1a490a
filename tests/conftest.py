"""Pytest configuration and shared fixtures."""

import math
import re
from typing import Any

import pytest

from finrecall.config.schema import FinrecallConfig
from finrecall.embeddings.client import EmbeddingError
from finrecall.memory.manager import MemoryManager
from finrecall.memory.persistent import PersistentVectorStore
from finrecall.memory.schema import MemoryMetadata, MemoryRecord, MemoryType
from finrecall.memory.semantic import EphemeralSemanticStore
from finrecall.vector.store import CollectionExistsError


class FakeEmbedding:
    """Deterministic bag-of-words embedding.

    Every distinct word gets its own axis, so cosine similarity is exactly
    the word-overlap similarity of two texts.
    """

    def __init__(self, dimension: int = 256):
        self.dimension = dimension
        self.vocabulary: dict[str, int] = {}
        self.calls: list[str] = []
        self.fail = False

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            index = self.vocabulary.setdefault(word, len(self.vocabulary) % self.dimension)
            vector[index] += 1.0
        return vector

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if self.fail:
            raise EmbeddingError("embedding provider unavailable")
        self.calls.extend(texts)
        return [self._vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    @property
    def model_name(self) -> str:
        return "fake-bag-of-words"


def _matches(metadata: dict[str, Any], where: dict[str, Any] | None) -> bool:
    if not where:
        return True
    if "$and" in where:
        return all(_matches(metadata, clause) for clause in where["$and"])

    ((key, condition),) = where.items()
    value = metadata.get(key)
    if not isinstance(condition, dict):
        return value == condition
    if "$eq" in condition:
        return value == condition["$eq"]
    if "$lt" in condition:
        return value is not None and value < condition["$lt"]
    raise ValueError(f"Unsupported filter: {condition}")


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeVectorDatabase:
    """In-memory stand-in for the external vector database."""

    def __init__(self):
        self.collections: dict[str, dict[str, Any]] = {}
        self.has_calls = 0
        self.create_calls = 0
        self.created_concurrently = False
        self.fail = False
        self.deleted_where: list[dict[str, Any]] = []
        self.queried_where: list[dict[str, Any] | None] = []

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("database unreachable")

    def _rows(self, collection: str) -> list[dict[str, Any]]:
        return self.collections[collection]["rows"]

    def has_collection(self, name: str) -> bool:
        self._check()
        self.has_calls += 1
        return name in self.collections

    def create_collection(self, name: str, metadata: dict[str, Any]) -> None:
        self._check()
        self.create_calls += 1
        if self.created_concurrently or name in self.collections:
            self.collections.setdefault(name, {"metadata": metadata, "rows": []})
            raise CollectionExistsError(name)
        self.collections[name] = {"metadata": metadata, "rows": []}

    def add(self, collection, ids, embeddings, documents, metadata) -> None:
        self._check()
        for id_, vector, doc, meta in zip(ids, embeddings, documents, metadata):
            self._rows(collection).append(
                {"id": id_, "vector": vector, "document": doc, "metadata": dict(meta)}
            )

    def query(self, collection, query_embedding, top_k=10, where=None):
        self._check()
        self.queried_where.append(where)
        rows = [r for r in self._rows(collection) if _matches(r["metadata"], where)]
        scored = sorted(
            ((1.0 - _cosine(query_embedding, r["vector"]), r) for r in rows),
            key=lambda pair: pair[0],
        )[:top_k]
        return (
            [r["id"] for _, r in scored],
            [r["document"] for _, r in scored],
            [r["metadata"] for _, r in scored],
            [distance for distance, _ in scored],
        )

    def get(self, collection, where=None, limit=None):
        self._check()
        rows = [r for r in self._rows(collection) if _matches(r["metadata"], where)]
        if limit is not None:
            rows = rows[:limit]
        return (
            [r["id"] for r in rows],
            [r["document"] for r in rows],
            [r["metadata"] for r in rows],
        )

    def delete(self, collection, where) -> None:
        self._check()
        self.deleted_where.append(where)
        self.collections[collection]["rows"] = [
            r for r in self._rows(collection) if not _matches(r["metadata"], where)
        ]


def _make_record(
    content: str,
    user_id: str = "u1",
    type: MemoryType = MemoryType.PREFERENCE,
    timestamp: int = 1000,
    **metadata: Any,
) -> MemoryRecord:
    return MemoryRecord(
        type=type,
        content=content,
        metadata=MemoryMetadata(user_id=user_id, timestamp=timestamp, **metadata),
    )


@pytest.fixture
def make_record():
    """Provide a record builder with sensible defaults."""
    return _make_record


@pytest.fixture
def default_config() -> FinrecallConfig:
    """Provide a default configuration for tests."""
    return FinrecallConfig()


@pytest.fixture
def embedding_client() -> FakeEmbedding:
    """Provide a deterministic embedding client."""
    return FakeEmbedding()


@pytest.fixture
def vector_database() -> FakeVectorDatabase:
    """Provide an in-memory vector database."""
    return FakeVectorDatabase()


@pytest.fixture
def ephemeral_store(embedding_client) -> EphemeralSemanticStore:
    """Provide an ephemeral store over a fresh index."""
    return EphemeralSemanticStore(embedding_client=embedding_client)


@pytest.fixture
def persistent_store(vector_database, embedding_client) -> PersistentVectorStore:
    """Provide a persistent store over the fake database."""
    return PersistentVectorStore(database=vector_database, embedding_client=embedding_client)


@pytest.fixture
def memory_manager(ephemeral_store, persistent_store) -> MemoryManager:
    """Provide a memory manager wired to both fake-backed stores."""
    return MemoryManager(ephemeral_store=ephemeral_store, persistent_store=persistent_store)
