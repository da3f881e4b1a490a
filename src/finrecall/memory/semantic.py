"""Ephemeral semantic memory store for unregistered users."""

import logging

from finrecall.embeddings.client import EmbeddingClient
from finrecall.memory.errors import NotSupportedError, StoreSearchError, StoreWriteError
from finrecall.memory.schema import MemoryRecord, MemorySearchResult, MemoryType
from finrecall.memory.store import check_delete_criteria, equality_filters
from finrecall.vector.memory import DocumentFilter, IndexedDocument, InMemoryVectorIndex

logger = logging.getLogger(__name__)


def _matching(filters: dict[str, str]) -> DocumentFilter:
    def predicate(doc: IndexedDocument) -> bool:
        return all(doc.metadata.get(key) == value for key, value in filters.items())

    return predicate


class EphemeralSemanticStore:
    """Memory store backed by an in-process vector index.

    Contents live exactly as long as the index object, which the process
    creates once at startup. Nothing is ever written to durable storage, so
    content from unauthenticated users cannot leak into user-scoped records.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        index: InMemoryVectorIndex | None = None,
        min_score: float = 0.7,
        max_results: int = 10,
    ):
        """Initialize the ephemeral store.

        Args:
            embedding_client: Provider used to embed records and queries
            index: Index to write into (a fresh one when None)
            min_score: Default relevance threshold for searches
            max_results: Default search limit
        """
        self.embedding_client = embedding_client
        self.index = index if index is not None else InMemoryVectorIndex()
        self.min_score = min_score
        self.max_results = max_results

    async def add_memory(self, record: MemoryRecord) -> None:
        """Embed a record and append it to the index."""
        try:
            vector = await self.embedding_client.embed_single(record.content)
            self.index.add(
                [vector],
                [IndexedDocument(content=record.content, metadata=record.to_document())],
            )
        except Exception as e:
            logger.error("Failed to add ephemeral memory: %s", e)
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
        """Search the index; filters apply before the limit."""
        limit = self.max_results if limit is None else limit
        min_score = self.min_score if min_score is None else min_score
        predicate = _matching(equality_filters(type, user_id, category, agent_name))

        try:
            vector = await self.embedding_client.embed_single(query)
        except Exception as e:
            logger.error("Failed to embed search query: %s", e)
            raise StoreSearchError(f"Failed to search memories: {e}") from e

        hits = self.index.similarity_search(vector, limit, predicate)

        return [
            MemorySearchResult(
                record=MemoryRecord.from_document(doc.content, doc.metadata),
                score=score,
            )
            for doc, score in hits
            if score >= min_score
        ]

    async def get_user_memories(
        self,
        user_id: str,
        type: MemoryType | None = None,
    ) -> list[MemoryRecord]:
        """Return every record owned by ``user_id``."""
        docs = self.index.documents(_matching(equality_filters(type=type, user_id=user_id)))
        return [MemoryRecord.from_document(doc.content, doc.metadata) for doc in docs]

    async def delete_memories(
        self,
        user_id: str | None = None,
        type: MemoryType | None = None,
        before: int | None = None,
    ) -> None:
        """Always fails: the in-process index cannot delete.

        Raises:
            InvalidCriteriaError: If no criterion is given
            NotSupportedError: Otherwise
        """
        check_delete_criteria(user_id, type, before)
        raise NotSupportedError("Delete operation not supported in the ephemeral memory store")
