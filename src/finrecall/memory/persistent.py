"""Durable memory store for registered users, backed by an external vector database."""

import asyncio
import functools
import logging
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from finrecall.embeddings.client import EmbeddingClient
from finrecall.memory.errors import StoreSearchError, StoreWriteError
from finrecall.memory.schema import MemoryRecord, MemorySearchResult, MemoryType
from finrecall.memory.store import check_delete_criteria, equality_filters
from finrecall.vector.store import CollectionExistsError, VectorDatabase

logger = logging.getLogger(__name__)

T = TypeVar("T")

MEMORY_COLLECTION_NAME = "financial_memory"

MEMORY_COLLECTION_METADATA: dict[str, Any] = {
    "hnsw:space": "cosine",
    "description": "Financial memory for registered users",
}


def build_where(
    filters: dict[str, Any],
    before: int | None = None,
) -> dict[str, Any] | None:
    """Build a conjunctive metadata filter.

    Args:
        filters: Field equality constraints (wire keys)
        before: Optional exclusive upper bound on ``timestamp`` (epoch ms)

    Returns:
        A where clause, or None when there is nothing to filter on
    """
    clauses: list[dict[str, Any]] = [{key: {"$eq": value}} for key, value in filters.items()]
    if before is not None:
        clauses.append({"timestamp": {"$lt": before}})

    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


class PersistentVectorStore:
    """Memory store persisted in an external vector database.

    The collection is provisioned lazily on first use. Database calls are
    blocking and run in the default executor.
    """

    def __init__(
        self,
        database: VectorDatabase,
        embedding_client: EmbeddingClient,
        collection_name: str = MEMORY_COLLECTION_NAME,
        min_score: float = 0.7,
        max_results: int = 10,
    ):
        """Initialize the persistent store.

        Args:
            database: External vector database adapter
            embedding_client: Provider used to embed records and queries
            collection_name: Collection holding memory records
            min_score: Default relevance threshold for searches
            max_results: Default search limit
        """
        self.database = database
        self.embedding_client = embedding_client
        self.collection_name = collection_name
        self.min_score = min_score
        self.max_results = max_results
        self._initialized = False

    async def _run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))

    async def ensure_initialized(self) -> None:
        """Create the memory collection unless it already exists."""
        if self._initialized:
            return

        try:
            exists = await self._run(self.database.has_collection, self.collection_name)
            if not exists:
                await self._run(
                    self.database.create_collection,
                    self.collection_name,
                    dict(MEMORY_COLLECTION_METADATA),
                )
                logger.info("Created memory collection '%s'", self.collection_name)
        except CollectionExistsError:
            # Another worker created it between the check and the create
            logger.debug("Memory collection '%s' created concurrently", self.collection_name)
        except Exception as e:
            logger.error("Failed to initialize persistent memory store: %s", e)
            raise

        self._initialized = True

    async def add_memory(self, record: MemoryRecord) -> None:
        """Embed a record and write it to the database."""
        try:
            await self.ensure_initialized()
            vector = await self.embedding_client.embed_single(record.content)
            await self._run(
                self.database.add,
                self.collection_name,
                ids=[uuid.uuid4().hex],
                embeddings=[vector],
                documents=[record.content],
                metadata=[record.to_document()],
            )
        except Exception as e:
            logger.error("Failed to add memory: %s", e)
            raise StoreWriteError(f"Failed to add memory: {e}") from e

    async def search_memories(
        self,
        query: str,
        type: MemoryType | None = None,
        user_id: str | None = None,
        limit: int | None = None,
        min_score: float | None = None,
        category: str | None = None,
        agent_name: str | None = None,
    ) -> list[MemorySearchResult]:
        """Nearest-neighbor search restricted to the matching records."""
        limit = self.max_results if limit is None else limit
        min_score = self.min_score if min_score is None else min_score
        where = build_where(equality_filters(type, user_id, category, agent_name))

        try:
            await self.ensure_initialized()
            vector = await self.embedding_client.embed_single(query)
            _ids, documents, metadatas, distances = await self._run(
                self.database.query,
                self.collection_name,
                vector,
                top_k=limit,
                where=where,
            )
        except Exception as e:
            logger.error("Failed to search memories: %s", e)
            raise StoreSearchError(f"Failed to search memories: {e}") from e

        results = []
        for doc, meta, distance in zip(documents, metadatas, distances, strict=False):
            # Cosine distance (lower = closer) to similarity in [0, 1]
            score = min(1.0, max(0.0, 1.0 - distance))
            if score < min_score:
                continue
            results.append(
                MemorySearchResult(record=MemoryRecord.from_document(doc, meta), score=score)
            )

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    async def get_user_memories(
        self,
        user_id: str,
        type: MemoryType | None = None,
    ) -> list[MemoryRecord]:
        """Return every record owned by ``user_id``."""
        where = build_where(equality_filters(type=type, user_id=user_id))

        try:
            await self.ensure_initialized()
            _ids, documents, metadatas = await self._run(
                self.database.get, self.collection_name, where=where
            )
        except Exception as e:
            logger.error("Failed to get user memories: %s", e)
            raise StoreSearchError(f"Failed to get user memories: {e}") from e

        return [
            MemoryRecord.from_document(doc, meta)
            for doc, meta in zip(documents, metadatas, strict=False)
        ]

    async def delete_memories(
        self,
        user_id: str | None = None,
        type: MemoryType | None = None,
        before: int | None = None,
    ) -> None:
        """Bulk delete every record matching all criteria.

        Raises:
            InvalidCriteriaError: If no criterion is given
            StoreWriteError: If the database fails
        """
        check_delete_criteria(user_id, type, before)
        where = build_where(equality_filters(type=type, user_id=user_id), before=before)

        try:
            await self.ensure_initialized()
            await self._run(self.database.delete, self.collection_name, where)
        except Exception as e:
            logger.error("Failed to delete memories: %s", e)
            raise StoreWriteError(f"Failed to delete memories: {e}") from e
