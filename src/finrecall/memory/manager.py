"""High-level memory management for the conversation pipeline."""

import logging
from datetime import datetime
from typing import Any, Literal

from finrecall.memory.schema import (
    MemoryMetadata,
    MemoryRecord,
    MemorySearchResult,
    MemoryType,
    now_ms,
)
from finrecall.memory.store import MemoryStore

logger = logging.getLogger(__name__)

CONTEXT_HEADER = "Relevant context from past interactions:"
CONTEXT_FOOTER = "\n\n"


def _format_timestamp(ts: int) -> str:
    try:
        return datetime.fromtimestamp(ts / 1000).strftime("%x, %X")
    except (ValueError, OverflowError, OSError):
        # Out of range for the platform clock; show the raw epoch value
        return str(ts)


def format_context(results: list[MemorySearchResult]) -> str:
    """Render search results as a prompt context block.

    Args:
        results: Search results, most relevant first

    Returns:
        The context block, or "" when there are no results
    """
    if not results:
        return ""

    lines = []
    for result in results:
        record = result.record
        timestamp = _format_timestamp(record.metadata.timestamp)
        lines.append(f"[{timestamp}] {record.type.value}: {record.content}")

    return f"{CONTEXT_HEADER}\n" + "\n".join(lines) + CONTEXT_FOOTER


class MemoryManager:
    """Routes memory operations to the store matching the user's registration.

    Both stores are built once at startup and injected; the manager owns
    them for the life of the process.
    """

    def __init__(
        self,
        ephemeral_store: MemoryStore,
        persistent_store: MemoryStore,
        search_limit: int = 5,
        context_limit: int = 3,
        context_min_score: float = 0.8,
    ):
        """Initialize memory manager.

        Args:
            ephemeral_store: Store for unregistered users
            persistent_store: Store for registered users
            search_limit: Result cap for :meth:`search_relevant_memories`
            context_limit: Number of memories considered for prompt context
            context_min_score: Relevance required for prompt context
        """
        self.ephemeral_store = ephemeral_store
        self.persistent_store = persistent_store
        self.search_limit = search_limit
        self.context_limit = context_limit
        self.context_min_score = context_min_score

    def get_store(self, is_registered: bool) -> MemoryStore:
        """Select the backing store. Pure function of ``is_registered``."""
        return self.persistent_store if is_registered else self.ephemeral_store

    async def store_memory(self, record: MemoryRecord, is_registered: bool) -> None:
        """Write a record to the store selected by registration status."""
        await self.get_store(is_registered).add_memory(record)

    async def _store(
        self,
        type: MemoryType,
        user_id: str,
        content: str,
        is_registered: bool,
        **metadata: Any,
    ) -> None:
        fields = {"user_id": user_id, "timestamp": now_ms(), **metadata}
        record = MemoryRecord(type=type, content=content, metadata=MemoryMetadata(**fields))
        await self.store_memory(record, is_registered)

    async def store_conversation_memory(
        self,
        user_id: str,
        content: str,
        is_registered: bool,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Store a conversation turn.

        Args:
            user_id: Owner of the memory
            content: Message text
            is_registered: Selects the backing store
            metadata: Extra metadata fields (e.g. ``thread_id``, ``source``)
        """
        await self._store(
            MemoryType.CONVERSATION, user_id, content, is_registered, **(metadata or {})
        )

    async def store_financial_action(
        self,
        user_id: str,
        action: str,
        is_registered: bool,
        amount: float | None = None,
        category: str | None = None,
    ) -> None:
        """Store an action the user took, e.g. logging an expense."""
        await self._store(
            MemoryType.ACTION, user_id, action, is_registered, amount=amount, category=category
        )

    async def store_user_preference(
        self,
        user_id: str,
        preference: str,
        is_registered: bool,
        category: str | None = None,
    ) -> None:
        """Store a stated user preference."""
        await self._store(
            MemoryType.PREFERENCE, user_id, preference, is_registered, category=category
        )

    async def store_registration_step(
        self,
        user_id: str,
        step: str,
        status: Literal["started", "completed", "failed"],
        is_registered: bool,
        thread_id: str | None = None,
    ) -> None:
        """Record progress through the registration flow."""
        await self._store(
            MemoryType.REGISTRATION_STEP,
            user_id,
            f"Registration step {step} {status}",
            is_registered,
            thread_id=thread_id,
            registration_step=step,
            step_status=status,
        )

    async def store_routing_decision(
        self,
        user_id: str,
        from_node: str,
        to_node: str,
        reason: str,
        is_registered: bool,
        thread_id: str | None = None,
    ) -> None:
        """Record why the orchestrator routed from one agent to another."""
        await self._store(
            MemoryType.ROUTING_DECISION,
            user_id,
            reason,
            is_registered,
            thread_id=thread_id,
            from_node=from_node,
            to_node=to_node,
            routing_reason=reason,
        )

    async def store_agent_interaction(
        self,
        user_id: str,
        agent_name: str,
        content: str,
        interaction_type: Literal["input", "output", "error"],
        is_registered: bool,
        thread_id: str | None = None,
    ) -> None:
        """Record an input, output or error of a specific agent."""
        await self._store(
            MemoryType.AGENT_INTERACTION,
            user_id,
            content,
            is_registered,
            thread_id=thread_id,
            agent_name=agent_name,
            interaction_type=interaction_type,
            source=agent_name,
        )

    async def search_relevant_memories(
        self,
        query: str,
        user_id: str,
        is_registered: bool,
        type: MemoryType | None = None,
    ) -> list[MemorySearchResult]:
        """Search a user's memories, capped at ``search_limit`` results."""
        return await self.get_store(is_registered).search_memories(
            query,
            type=type,
            user_id=user_id,
            limit=self.search_limit,
        )

    async def get_user_memories(
        self,
        user_id: str,
        is_registered: bool,
        type: MemoryType | None = None,
    ) -> list[MemoryRecord]:
        """List every memory of a user in the selected store."""
        return await self.get_store(is_registered).get_user_memories(user_id, type=type)

    async def get_context_for_prompt(
        self,
        user_id: str,
        query: str,
        is_registered: bool,
    ) -> str:
        """Build the memory context block for the next reply.

        Context is an enhancement: any failure is logged and yields "".

        Returns:
            Formatted context, or "" when nothing relevant enough was found
        """
        try:
            results = await self.get_store(is_registered).search_memories(
                query,
                user_id=user_id,
                limit=self.context_limit,
                min_score=self.context_min_score,
            )
            return format_context(results)
        except Exception as e:
            logger.warning("Memory context unavailable for user %s: %s", user_id, e)
            return ""

    async def cleanup_old_memories(
        self,
        user_id: str,
        before_timestamp: int,
        is_registered: bool,
        type: MemoryType | None = None,
    ) -> None:
        """Delete a user's memories older than ``before_timestamp`` (epoch ms).

        Raises:
            NotSupportedError: For unregistered users, whose store cannot delete
        """
        await self.get_store(is_registered).delete_memories(
            user_id=user_id, type=type, before=before_timestamp
        )
