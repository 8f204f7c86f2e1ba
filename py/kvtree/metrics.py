"""Per-operation timing buffer."""
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .types import MetricItem
from .utils import current_ticks, elapsed_ms

logger = logging.getLogger(__name__)


class Probe:
    """Collects the counters of one tracked call.

    The call body updates ``processed_items`` and calls fail() on a failed
    outcome; the recorder reads both when the call finishes.
    """

    def __init__(self, suffix: str = ""):
        self.processed_items = 0
        self.suffix = suffix
        self.comment = "Done" + suffix

    def fail(self) -> None:
        self.comment = "Failed" + self.suffix


class MetricsRecorder:
    """Thread-safe buffer of MetricItem entries.

    Recording is off until enable() is called. The buffer has its own lock,
    independent of any store lock.
    """

    def __init__(self, enabled: bool = False):
        """Initialize the recorder.

        Args:
            enabled: Start with recording switched on
        """
        self._items: List[MetricItem] = []
        self._lock = threading.Lock()
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    @contextmanager
    def track(self, op_type: str, key: Optional[str] = None,
              suffix: str = "") -> Iterator[Probe]:
        """Time the body of a with-block and record it when enabled.

        An exception escaping the block is recorded with a failed comment
        and re-raised.

        Args:
            op_type: Operation name stored in MetricItem.type
            key: Key argument of the call, if any
            suffix: Appended to the "Done"/"Failed" comment

        Yields:
            Probe for the block to fill in
        """
        probe = Probe(suffix)
        if not self._enabled:
            yield probe
            return

        started = current_ticks()
        try:
            yield probe
        except Exception:
            probe.fail()
            self.record(MetricItem(op_type, key, elapsed_ms(started),
                                   probe.processed_items, probe.comment))
            raise
        self.record(MetricItem(op_type, key, elapsed_ms(started),
                               probe.processed_items, probe.comment))

    def record(self, item: MetricItem) -> None:
        """Append one item to the buffer."""
        with self._lock:
            self._items.append(item)

    def dump(self) -> List[MetricItem]:
        """Return every buffered item and empty the buffer.

        Returns:
            List of MetricItem in recording order
        """
        with self._lock:
            items = self._items
            self._items = []
        logger.debug("Drained %d metric items", len(items))
        return items
