"""Memory store interface shared by the ephemeral and persistent backends."""

from typing import Protocol

from finrecall.memory.errors import InvalidCriteriaError
from finrecall.memory.schema import MemoryRecord, MemorySearchResult, MemoryType


class MemoryStore(Protocol):
    """Protocol for memory store implementations."""

    async def add_memory(self, record: MemoryRecord) -> None:
        """Store a new memory.

        Args:
            record: Record to store

        Raises:
            StoreWriteError: If the provider or database fails
        """
        ...

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
        """Search memories by semantic similarity.

        Filters are applied before the limit, so ``limit`` results are
        returned whenever that many matching records clear ``min_score``.

        Args:
            query: Free-text query
            type: Only return records with this tag
            user_id: Only return records owned by this user
            limit: Maximum number of results (store default if None)
            min_score: Minimum relevance in [0, 1] (store default if None)
            category: Only return records in this category
            agent_name: Only return records produced by this agent

        Returns:
            Results ordered by descending score

        Raises:
            StoreSearchError: If the provider or database fails
        """
        ...

    async def get_user_memories(
        self,
        user_id: str,
        type: MemoryType | None = None,
    ) -> list[MemoryRecord]:
        """Get all memories for a user, in no particular order.

        Args:
            user_id: Owner of the records
            type: Optional tag filter

        Returns:
            Matching records
        """
        ...

    async def delete_memories(
        self,
        user_id: str | None = None,
        type: MemoryType | None = None,
        before: int | None = None,
    ) -> None:
        """Delete every memory matching all given criteria.

        Args:
            user_id: Owner of the records
            type: Tag of the records
            before: Only records with a timestamp (epoch ms) earlier than this

        Raises:
            InvalidCriteriaError: If no criterion is given
        """
        ...


def check_delete_criteria(
    user_id: str | None,
    type: MemoryType | None,
    before: int | None,
) -> None:
    """Refuse an unbounded wipe.

    Raises:
        InvalidCriteriaError: If every criterion is absent
    """
    if not user_id and type is None and before is None:
        msg = "At least one deletion criterion must be specified"
        raise InvalidCriteriaError(msg)


def equality_filters(
    type: MemoryType | None = None,
    user_id: str | None = None,
    category: str | None = None,
    agent_name: str | None = None,
) -> dict[str, str]:
    """Collect the metadata equality filters requested by a search.

    Keys are wire keys as produced by :meth:`MemoryRecord.to_document`.
    """
    filters: dict[str, str] = {}
    if user_id:
        filters["userId"] = user_id
    if type:
        filters["type"] = MemoryType(type).value
    if category:
        filters["category"] = category
    if agent_name:
        filters["agentName"] = agent_name
    return filters
