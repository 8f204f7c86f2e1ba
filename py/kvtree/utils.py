"""Helper utilities for kvtree."""
import time
from typing import Optional


def current_ticks():
    """Get a monotonic timestamp in seconds for measuring elapsed time."""
    return time.perf_counter()


def elapsed_ms(started):
    """Milliseconds elapsed since a timestamp taken with current_ticks().

    Args:
        started: Value previously returned by current_ticks()

    Returns:
        float: Elapsed wall-clock time in milliseconds
    """
    return (current_ticks() - started) * 1000.0


def is_blank(text: Optional[str]) -> bool:
    """Check whether a string is None, empty or whitespace-only."""
    return text is None or not text.strip()


def normalize_value(value: Optional[str]) -> Optional[str]:
    """Map blank values to None, the tombstone marker used by the tree."""
    if is_blank(value):
        return None
    return value
