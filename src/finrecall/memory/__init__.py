"""Conversation memory system for finrecall.

Unregistered users are served by an in-process semantic store that lives as
long as the process; registered users by a durable store in an external
vector database. The manager picks between them, and the coordinator plugs
retrieval, context injection, deduplication and pruning into every turn.

Components:

- :class:`MemoryManager` - Store selection and domain helpers
- :class:`ConversationMemoryCoordinator` - Per-turn pipeline integration
- :class:`EphemeralSemanticStore` - In-process store for unregistered users
- :class:`PersistentVectorStore` - Durable store for registered users
"""

from finrecall.memory.coordinator import ConversationMemoryCoordinator
from finrecall.memory.errors import (
    InvalidCriteriaError,
    MemoryStoreError,
    NotSupportedError,
    StoreSearchError,
    StoreWriteError,
)
from finrecall.memory.manager import MemoryManager
from finrecall.memory.persistent import PersistentVectorStore
from finrecall.memory.schema import MemoryMetadata, MemoryRecord, MemorySearchResult, MemoryType
from finrecall.memory.semantic import EphemeralSemanticStore
from finrecall.memory.state import ConversationState, MemoryContext
from finrecall.memory.store import MemoryStore

__all__ = [
    "ConversationMemoryCoordinator",
    "ConversationState",
    "EphemeralSemanticStore",
    "InvalidCriteriaError",
    "MemoryContext",
    "MemoryManager",
    "MemoryMetadata",
    "MemoryRecord",
    "MemorySearchResult",
    "MemoryStore",
    "MemoryStoreError",
    "MemoryType",
    "NotSupportedError",
    "PersistentVectorStore",
    "StoreSearchError",
    "StoreWriteError",
]
