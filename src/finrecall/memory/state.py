"""Conversation state shared with the orchestration runtime."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class MemoryContext:
    """What memory contributed to the current turn."""

    relevant_history: str = ""
    last_interaction: datetime | None = None
    current_step: str = "unknown"


@dataclass
class ConversationState:
    """Per-thread state owned by the orchestration runtime.

    The memory coordinator mutates ``messages`` and ``memory_context`` in
    place; it never creates or discards a state.
    """

    user_id: str | None = None
    thread_id: str | None = None
    is_registered: bool = False
    messages: list[Any] = field(default_factory=list)
    memory_context: MemoryContext | None = None
    current_step: str | None = None
    last_routing_step: str | None = None  # Graph node that produced the last message
