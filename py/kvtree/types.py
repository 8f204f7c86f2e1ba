"""Type definitions for the tree store and its persisted form."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Node:
    """One segment of a key, with an optional value and ordered children."""
    segment: str
    value: Optional[str] = None
    # Keyed by segment; dict order is insertion order.
    children: Dict[str, "Node"] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """True when the node holds no value and has no children."""
        return self.value is None and not self.children


@dataclass(frozen=True)
class Record:
    """A flattened (key, value) pair as stored on disk."""
    key: str
    value: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the dict written into the JSON document."""
        return {"key": self.key, "value": self.value}


@dataclass
class MetricItem:
    """Timing and counters for one instrumented call."""
    type: str
    key: Optional[str] = None
    elapsed_ms: float = 0.0
    processed_items: int = 0
    comment: str = "Done"
