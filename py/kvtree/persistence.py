"""JSON file persistence for a TrieStore.

The file holds one document, ``{"records": [{"key": ..., "value": ...}]}``.
The adapter reads and writes the tree only through TrieStore.select() and
TrieStore.add(), so each of those calls is atomic on its own but a whole
save or load is not atomic with respect to other writers of the tree.
"""
import json
import logging
import os
import tempfile
import threading
from typing import Callable, List, Optional, Tuple

from .errors import (ConflictError, DocumentParseError, KvTreeError,
                     RecordNotFoundError, StorageUnavailableError)
from .keypath import require_key
from .metrics import MetricsRecorder, Probe
from .store import TrieStore
from .types import Record
from .utils import is_blank

logger = logging.getLogger(__name__)

RECORDS_FIELD = 'records'

Result = Tuple[bool, str]


def parse_document(text: str) -> List[Record]:
    """Parse the persisted JSON document into records.

    Args:
        text: Raw file contents

    Returns:
        List of records in file order

    Raises:
        DocumentParseError: If the text is not JSON or not the expected shape
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentParseError(f"Persisted document is not valid JSON: {exc}") from exc

    entries = document.get(RECORDS_FIELD) if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise DocumentParseError(f"Persisted document has no '{RECORDS_FIELD}' list")

    records = []
    for entry in entries:
        if not isinstance(entry, dict) or not isinstance(entry.get('key'), str):
            raise DocumentParseError("Persisted record has no string 'key'")
        value = entry.get('value')
        if value is not None and not isinstance(value, str):
            raise DocumentParseError(f"Persisted record {entry['key']!r} has a non-string value")
        records.append(Record(entry['key'], value))
    return records


def render_document(records: List[Record]) -> str:
    """Serialize records into the persisted JSON document."""
    return json.dumps({RECORDS_FIELD: [record.to_dict() for record in records]},
                      ensure_ascii=False)


class PersistenceAdapter:
    """Save and load TrieStore entries to and from a JSON file.

    Every public operation returns ``(ok, message)`` and never raises.
    """

    def __init__(self, store: TrieStore, file_path: Optional[str],
                 metrics: Optional[MetricsRecorder] = None):
        """Initialize the adapter.

        Args:
            store: The tree to read from and load into
            file_path: Backing file; None or "" disables persistence
            metrics: Recorder for per-call timings (the store's by default)
        """
        self.store = store
        self.file_path = file_path
        self._metrics = metrics if metrics is not None else store.metrics
        # Serializes read-modify-write cycles on the file. Always taken
        # before the store lock, never while holding it.
        self._file_lock = threading.Lock()

    def is_available(self) -> bool:
        """Check that the backing file exists (creating it) and is read/write."""
        if not self.file_path:
            return False

        try:
            if not os.path.exists(self.file_path):
                open(self.file_path, 'a', encoding='utf-8').close()
            with open(self.file_path, 'r+', encoding='utf-8'):
                pass
        except OSError as exc:
            logger.warning("Backing file %s is not usable: %s", self.file_path, exc)
            return False
        return True

    def save(self, key: str) -> Result:
        """Persist the current in-memory value of a key.

        A record is appended unless one with the same key and value already
        exists. The whole file is rewritten either way.
        """
        with self._metrics.track('Save', key) as probe:
            return self._outcome(probe, self._save, key)

    def load_all(self, replace: bool) -> Result:
        """Load every persisted record into memory.

        Args:
            replace: Overwrite keys that already hold a value; when False
                those records are skipped silently
        """
        with self._metrics.track('LoadAll', None, _replace_suffix(replace)) as probe:
            return self._outcome(probe, self._load_all, replace)

    def load(self, replace: bool, key: str) -> Result:
        """Load one persisted key into memory.

        Unlike load_all(), a key that already holds a value is reported as a
        conflict when ``replace`` is False.
        """
        with self._metrics.track('Load', key, _replace_suffix(replace)) as probe:
            return self._outcome(probe, self._load, replace, key)

    def purge(self, key: str) -> Result:
        """Remove a key's record from the file. Memory is not touched."""
        with self._metrics.track('Purge', key) as probe:
            return self._outcome(probe, self._purge, key)

    def read_records(self) -> List[Record]:
        """Read the persisted records.

        Raises:
            KvTreeError: If storage is unavailable, the file is empty or
                the document cannot be parsed
        """
        self._require_storage()
        with self._file_lock:
            return self._read_records()

    def _outcome(self, probe: Probe, action: Callable[..., str], *args) -> Result:
        try:
            message = action(probe, *args)
        except KvTreeError as exc:
            probe.fail()
            logger.debug("%s failed: %s", action.__name__.lstrip('_'), exc)
            return False, str(exc)
        except OSError as exc:
            probe.fail()
            logger.warning("I/O error on %s: %s", self.file_path, exc)
            return False, str(exc)
        return True, message

    def _save(self, probe: Probe, key: str) -> str:
        require_key(key)
        self._require_storage()

        with self._file_lock:
            records = self._read_records(allow_empty=True)
            probe.processed_items = len(records)

            _, value = self.store.select(key)
            if value is None:
                raise RecordNotFoundError("Variable does not exist")

            # Duplicate means same key and same value.
            record = Record(key, value)
            if record not in records:
                records.append(record)
            self._write_records(records)

        return "Variable is saved"

    def _load_all(self, probe: Probe, replace: bool) -> str:
        self._require_storage()
        with self._file_lock:
            records = self._read_records()

        for record in records:
            if replace or self.store.select(record.key)[1] is None:
                self.store.add(record.key, record.value)
            probe.processed_items += 1

        logger.debug("Loaded %d records from %s", len(records), self.file_path)
        return "Variables are loaded"

    def _load(self, probe: Probe, replace: bool, key: str) -> str:
        require_key(key)
        self._require_storage()
        with self._file_lock:
            records = self._read_records()
        probe.processed_items = len(records)

        record = next((r for r in records if r.key == key), None)
        if record is None:
            raise RecordNotFoundError("Variable could not be located in the file")

        if not replace and self.store.select(key)[1] is not None:
            raise ConflictError("Variable already exist and override is not allowed")

        self.store.add(record.key, record.value)
        return "Variable is loaded"

    def _purge(self, probe: Probe, key: str) -> str:
        require_key(key)
        self._require_storage()

        with self._file_lock:
            records = self._read_records()
            probe.processed_items = len(records)

            index = next((i for i, r in enumerate(records) if r.key == key), None)
            if index is None:
                raise RecordNotFoundError("Variable did not exist in the file")
            del records[index]
            self._write_records(records)

        return "Variable is purged from file"

    def _require_storage(self) -> None:
        if not self.is_available():
            raise StorageUnavailableError()

    def _read_records(self, allow_empty: bool = False) -> List[Record]:
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except UnicodeDecodeError as exc:
            logger.warning("Could not decode %s", self.file_path)
            raise DocumentParseError(f"Persisted document is not valid UTF-8: {exc}") from exc

        if is_blank(text):
            if allow_empty:
                return []
            raise RecordNotFoundError("File is empty")

        try:
            return parse_document(text)
        except DocumentParseError:
            logger.warning("Could not parse %s", self.file_path)
            raise

    def _write_records(self, records: List[Record]) -> None:
        """Replace the file contents via a temp file and rename."""
        directory = os.path.dirname(os.path.abspath(self.file_path))
        fd, tmp = tempfile.mkstemp(dir=directory, prefix='.kvtree-', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(render_document(records))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.file_path)
        except OSError:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise


def _replace_suffix(replace: bool) -> str:
    return f"/Replace={str(bool(replace)).lower()}"
