"""Exception types raised inside kvtree.

Persistence operations convert these into ``(False, message)`` results, so the
message of every exception is meant to be shown to the caller verbatim.
"""


class KvTreeError(Exception):
    """Base class for all kvtree errors."""


class KeyValidationError(KvTreeError):
    """The key is missing, empty or whitespace-only."""

    def __init__(self, message: str = "Key is not specified"):
        super().__init__(message)


class StorageUnavailableError(KvTreeError):
    """No usable backing file is configured."""

    def __init__(self, message: str = "Persistent storage is not allowed"):
        super().__init__(message)


class RecordNotFoundError(KvTreeError):
    """A key is absent in memory or in the persisted document."""


class ConflictError(KvTreeError):
    """A key already holds a value and overwriting was not requested."""


class DocumentParseError(KvTreeError):
    """The persisted document is not valid JSON or has the wrong shape."""
