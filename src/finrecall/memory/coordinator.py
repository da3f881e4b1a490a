"""Per-turn integration of memory into the conversation pipeline."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from finrecall.memory.manager import CONTEXT_HEADER, MemoryManager
from finrecall.memory.messages import (
    MAX_MESSAGES,
    PRUNE_MAX_MESSAGES,
    ChatMessage,
    NormalizedMessage,
    deduplicate_messages,
    normalize_message,
    normalize_messages,
    prune_messages,
)
from finrecall.memory.state import ConversationState, MemoryContext

logger = logging.getLogger(__name__)

MessageFactory = Callable[[str, str], Any]


class ConversationMemoryCoordinator:
    """Runs memory retrieval before a reply and persistence after it.

    The orchestration runtime calls :meth:`process_state_with_memory` before
    generating a reply and :meth:`save_ai_message_to_memory` afterwards.
    Neither method raises: memory problems degrade recall, they never block
    a reply.

    Turns of the same thread are expected to be serialized by the runtime;
    the coordinator keeps no per-thread state.
    """

    def __init__(
        self,
        manager: MemoryManager,
        max_messages: int = MAX_MESSAGES,
        prune_max: int = PRUNE_MAX_MESSAGES,
        message_factory: MessageFactory = ChatMessage,
    ):
        """Initialize the coordinator.

        Args:
            manager: Memory manager used for retrieval and persistence
            max_messages: Hard cap applied by deduplication
            prune_max: Soft bound applied by pruning
            message_factory: Builds the injected context message from
                ``(role, content)``, so it matches the runtime's message type
        """
        self.manager = manager
        self.max_messages = max_messages
        self.prune_max = prune_max
        self.message_factory = message_factory

    def _has_context_message(self, messages: list[NormalizedMessage]) -> bool:
        return any(m.is_system and CONTEXT_HEADER in m.content for m in messages)

    async def process_state_with_memory(
        self,
        state: ConversationState,
        message: str,
    ) -> ConversationState:
        """Deduplicate history and inject relevant memory before a reply.

        Args:
            state: Conversation state, mutated in place
            message: Incoming user message, used as the retrieval query

        Returns:
            The same state object; unmodified if anything failed
        """
        if not getattr(state, "user_id", None):
            return state

        try:
            history: list[NormalizedMessage] | None = None
            if state.messages is not None:
                history = deduplicate_messages(
                    normalize_messages(state.messages), self.max_messages
                )
                logger.debug(
                    "Deduplicated history for thread %s: %d messages",
                    state.thread_id,
                    len(history),
                )

            context = await self.manager.get_context_for_prompt(
                state.user_id, message, state.is_registered
            )

            if history is not None:
                if not context:
                    history = prune_messages(history, self.prune_max)
                elif not self._has_context_message(history):
                    injected = normalize_message(self.message_factory("system", context))
                    history = [injected, *prune_messages(history, self.prune_max)]

        except Exception:
            logger.error("Error processing state with memory", exc_info=True)
            return state

        # Every step succeeded; only now touch the state
        if history is not None:
            state.messages = [m.original for m in history]
        if context:
            if getattr(state, "memory_context", None) is None:
                current_step = getattr(state, "current_step", None) or "unknown"
                state.memory_context = MemoryContext(current_step=current_step)
            state.memory_context.relevant_history = context
            state.memory_context.last_interaction = datetime.now()

        return state

    async def save_ai_message_to_memory(self, state: ConversationState) -> None:
        """Persist the last assistant message of the turn, if there is one."""
        if not getattr(state, "user_id", None) or not getattr(state, "messages", None):
            return

        try:
            last = normalize_message(state.messages[-1])
            if last is None or last.role != "assistant" or not last.content:
                return

            await self.manager.store_conversation_memory(
                state.user_id,
                last.content,
                state.is_registered,
                {
                    "thread_id": state.thread_id,
                    "source": state.last_routing_step or "unknown",
                },
            )
            logger.debug(
                "Stored memory for thread %s (user=%s, registered=%s)",
                state.thread_id,
                state.user_id,
                state.is_registered,
            )
        except Exception:
            logger.error("Error saving AI message to memory", exc_info=True)
