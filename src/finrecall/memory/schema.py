"""Pydantic models for memory records."""

import time
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class MemoryType(str, Enum):
    """Closed set of memory record tags."""

    TRANSACTION = "transaction"
    PREFERENCE = "preference"
    CONVERSATION = "conversation"
    ACTION = "action"
    REGISTRATION_STEP = "registration_step"
    ROUTING_DECISION = "routing_decision"
    AGENT_INTERACTION = "agent_interaction"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class MemoryMetadata(BaseModel):
    """Metadata attached to a memory record.

    Field aliases are the wire keys used when a record is flattened for a
    vector database, so documents written by other services stay readable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(alias="userId")
    timestamp: int = Field(description="Creation time in epoch milliseconds")
    thread_id: str | None = Field(default=None, alias="threadId")
    category: str | None = None
    amount: float | None = None
    confidence: float | None = None
    source: str | None = None

    # Registration specific
    registration_step: str | None = Field(default=None, alias="registrationStep")
    step_status: Literal["started", "completed", "failed"] | None = Field(
        default=None, alias="stepStatus"
    )

    # Routing specific
    from_node: str | None = Field(default=None, alias="fromNode")
    to_node: str | None = Field(default=None, alias="toNode")
    routing_reason: str | None = Field(default=None, alias="routingReason")

    # Agent specific
    agent_name: str | None = Field(default=None, alias="agentName")
    interaction_type: Literal["input", "output", "error"] | None = Field(
        default=None, alias="interactionType"
    )


class MemoryRecord(BaseModel):
    """A single stored fact or utterance. Immutable once written."""

    model_config = ConfigDict(frozen=True)

    type: MemoryType
    content: str
    metadata: MemoryMetadata

    def to_document(self) -> dict[str, Any]:
        """Flatten into wire-keyed metadata for a vector index.

        ``None`` values are dropped; vector databases reject them.
        """
        doc = self.metadata.model_dump(by_alias=True, exclude_none=True)
        doc["type"] = self.type.value
        return doc

    @classmethod
    def from_document(cls, content: str, metadata: dict[str, Any]) -> "MemoryRecord":
        """Rebuild a record from stored content and wire-keyed metadata."""
        fields = {k: v for k, v in metadata.items() if k != "type" and v is not None}
        return cls(
            type=MemoryType(metadata["type"]),
            content=content,
            metadata=MemoryMetadata.model_validate(fields),
        )


class MemorySearchResult(BaseModel):
    """A record returned by similarity search, with its relevance score."""

    model_config = ConfigDict(frozen=True)

    record: MemoryRecord
    score: float = Field(ge=0.0, le=1.0)
