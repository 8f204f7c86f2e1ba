"""kvtree - a hierarchical in-memory key-value store with JSON file persistence."""

from .db import MemoryDb
from .errors import (ConflictError, DocumentParseError, KeyValidationError,
                     KvTreeError, RecordNotFoundError, StorageUnavailableError)
from .keypath import is_valid_key, join_key, split_key
from .metrics import MetricsRecorder
from .persistence import PersistenceAdapter
from .store import TrieStore
from .types import MetricItem, Node, Record

__version__ = '0.1.0'

__all__ = [
    'MemoryDb', 'TrieStore', 'PersistenceAdapter', 'MetricsRecorder',
    'Node', 'Record', 'MetricItem',
    'split_key', 'join_key', 'is_valid_key',
    'KvTreeError', 'KeyValidationError', 'StorageUnavailableError',
    'RecordNotFoundError', 'ConflictError', 'DocumentParseError',
]
