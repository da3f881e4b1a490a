"""Exceptions raised by memory stores."""


class MemoryStoreError(Exception):
    """Base class for memory store failures."""


class StoreWriteError(MemoryStoreError):
    """A record could not be written (provider or network failure)."""


class StoreSearchError(MemoryStoreError):
    """A search or listing could not be completed (provider or network failure)."""


class InvalidCriteriaError(MemoryStoreError):
    """Delete was called without any filter field."""


class NotSupportedError(MemoryStoreError):
    """The backing index lacks the primitive needed for this operation."""
