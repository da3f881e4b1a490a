"""Tests for the ChromaDB adapter."""

import uuid

import pytest

try:
    import chromadb  # noqa: F401

    from finrecall.vector.chromadb import ChromaDBDatabase
except Exception:
    pytest.skip(
        "chromadb not compatible with this Python version",
        allow_module_level=True,
    )

from finrecall.memory.persistent import MEMORY_COLLECTION_METADATA
from finrecall.vector.store import CollectionExistsError


@pytest.fixture
def database():
    """Create an embedded in-memory ChromaDB database."""
    return ChromaDBDatabase()


@pytest.fixture
def collection(database):
    """Create a uniquely named collection for test isolation."""
    name = f"test_memory_{uuid.uuid4().hex[:8]}"
    database.create_collection(name, dict(MEMORY_COLLECTION_METADATA))
    yield name
    database.client.delete_collection(name=name)


def _seed(database, collection):
    database.add(
        collection,
        ids=["a", "b", "c"],
        embeddings=[[1.0, 0.0, 0.0], [0.8, 0.6, 0.0], [0.0, 0.0, 1.0]],
        documents=["rent paid", "rent reminder", "coffee"],
        metadata=[
            {"userId": "u1", "type": "action", "timestamp": 1000},
            {"userId": "u1", "type": "conversation", "timestamp": 3000},
            {"userId": "u2", "type": "action", "timestamp": 1000},
        ],
    )


def test_has_and_create_collection(database, collection):
    assert database.has_collection(collection)
    assert not database.has_collection(f"missing_{uuid.uuid4().hex[:8]}")


def test_create_existing_collection(database, collection):
    with pytest.raises(CollectionExistsError):
        database.create_collection(collection, dict(MEMORY_COLLECTION_METADATA))


def test_query_returns_cosine_distances(database, collection):
    _seed(database, collection)

    ids, documents, metadatas, distances = database.query(collection, [1.0, 0.0, 0.0], top_k=2)

    assert ids == ["a", "b"]
    assert documents == ["rent paid", "rent reminder"]
    assert metadatas[0]["type"] == "action"
    assert distances[0] == pytest.approx(0.0, abs=1e-4)
    assert distances[1] == pytest.approx(0.2, abs=1e-4)


def test_query_with_where(database, collection):
    _seed(database, collection)

    ids, _, _, _ = database.query(
        collection,
        [1.0, 0.0, 0.0],
        top_k=1,
        where={"$and": [{"userId": {"$eq": "u1"}}, {"type": {"$eq": "conversation"}}]},
    )

    assert ids == ["b"]


def test_get_by_user(database, collection):
    _seed(database, collection)

    ids, documents, _ = database.get(collection, where={"userId": {"$eq": "u1"}})

    assert sorted(ids) == ["a", "b"]
    assert sorted(documents) == ["rent paid", "rent reminder"]


def test_delete_by_filter(database, collection):
    _seed(database, collection)

    database.delete(
        collection,
        where={"$and": [{"userId": {"$eq": "u1"}}, {"timestamp": {"$lt": 2000}}]},
    )

    ids, _, _ = database.get(collection)
    assert sorted(ids) == ["b", "c"]


def test_add_nothing(database, collection):
    database.add(collection, ids=[], embeddings=[], documents=[], metadata=[])

    ids, _, _ = database.get(collection)
    assert ids == []


def test_persistent_directory(tmp_path):
    name = f"test_persistent_{uuid.uuid4().hex[:8]}"
    database = ChromaDBDatabase(persist_directory=tmp_path / "chroma")
    database.create_collection(name, dict(MEMORY_COLLECTION_METADATA))

    assert (tmp_path / "chroma").is_dir()
    assert database.has_collection(name)
