"""MemoryDb: the tree store, its persistence and its metrics behind one object."""
from typing import Dict, List, Optional, Tuple

from .config import StoreConfig
from .metrics import MetricsRecorder
from .persistence import PersistenceAdapter, Result
from .store import TrieStore
from .types import MetricItem, Record


class MemoryDb:
    """Hierarchical in-memory key-value database with optional file storage.

    Example:
        db = MemoryDb("vars.json")
        db.add("app/db/host", "localhost")
        db.save("app/db/host")
        db.list_dir("app")  # {"app/db/host": "localhost"}
    """

    def __init__(self, file_path: Optional[str] = None, metrics_enabled: bool = False):
        """Initialize the database.

        Args:
            file_path: Backing file for save/load; None disables persistence
            metrics_enabled: Start with metric recording switched on
        """
        self._metrics = MetricsRecorder(enabled=metrics_enabled)
        self._store = TrieStore(self._metrics)
        self._persistence = PersistenceAdapter(self._store, file_path, self._metrics)

    @classmethod
    def from_config(cls, config: StoreConfig) -> "MemoryDb":
        return cls(config.file_path, config.metrics_enabled)

    @property
    def file_path(self) -> Optional[str]:
        return self._persistence.file_path

    # Tree

    def add(self, key: str, value: Optional[str]) -> bool:
        return self._store.add(key, value)

    def select(self, key: str) -> Tuple[Optional[str], Optional[str]]:
        return self._store.select(key)

    def list_all(self) -> Dict[str, str]:
        return self._store.list_all()

    def list_dir(self, key: str) -> Optional[Dict[str, str]]:
        return self._store.list_dir(key)

    def remove_all(self) -> None:
        self._store.remove_all()

    def remove_dir(self, key: str) -> bool:
        return self._store.remove_dir(key)

    def stats(self) -> Dict[str, int]:
        return self._store.stats()

    # Persistence

    def is_persistent_storage_enabled(self) -> bool:
        return self._persistence.is_available()

    def save(self, key: str) -> Result:
        return self._persistence.save(key)

    def load_all(self, replace: bool) -> Result:
        return self._persistence.load_all(replace)

    def load(self, replace: bool, key: str) -> Result:
        return self._persistence.load(replace, key)

    def purge(self, key: str) -> Result:
        return self._persistence.purge(key)

    def read_records(self) -> List[Record]:
        """Return the records currently in the file (raises KvTreeError)."""
        return self._persistence.read_records()

    # Metrics

    def is_metric_enabled(self) -> bool:
        return self._metrics.enabled

    def enable_metric(self) -> None:
        self._metrics.enable()

    def disable_metric(self) -> None:
        self._metrics.disable()

    def dump_metrics(self) -> List[MetricItem]:
        """Return the buffered metric items and clear the buffer."""
        return self._metrics.dump()
