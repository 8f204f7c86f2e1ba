"""Key parsing for slash-delimited paths."""
from typing import List, Optional, Sequence

from .errors import KeyValidationError
from .utils import is_blank

SEPARATOR = "/"


def split_key(key: str) -> List[str]:
    """Split a key into its segments.

    Leading, trailing or doubled separators produce empty-string segments,
    which are kept: ``"/a/"`` splits into ``["", "a", ""]``.

    Args:
        key: The key to split

    Returns:
        List of segments, in path order
    """
    return key.split(SEPARATOR)


def join_key(segments: Sequence[str]) -> str:
    """Rejoin segments produced by split_key()."""
    return SEPARATOR.join(segments)


def is_valid_key(key: Optional[str]) -> bool:
    """Return True when the key can be used to address the tree."""
    return isinstance(key, str) and not is_blank(key)


def require_key(key: Optional[str]) -> List[str]:
    """Validate a key and return its segments.

    Args:
        key: The key to validate

    Returns:
        List of segments

    Raises:
        KeyValidationError: If the key is None, empty or whitespace-only
    """
    if not is_valid_key(key):
        raise KeyValidationError()
    return split_key(key)
