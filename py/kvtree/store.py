"""Core tree store: slash-delimited keys held in a trie of Nodes."""
import logging
import threading
from typing import Dict, Iterator, List, Optional, Tuple

from .keypath import SEPARATOR, is_valid_key, split_key
from .metrics import MetricsRecorder
from .types import Node
from .utils import normalize_value

logger = logging.getLogger(__name__)

Children = Dict[str, Node]


def _iter_values(prefix: str, children: Children) -> Iterator[Tuple[str, str]]:
    """Yield (full key, value) for every valued node, pre-order."""
    stack = [(prefix, node) for node in reversed(list(children.values()))]
    while stack:
        prefix, node = stack.pop()
        path = prefix + node.segment
        if node.value is not None:
            yield path, node.value
        child_prefix = path + SEPARATOR
        stack.extend((child_prefix, child) for child in reversed(list(node.children.values())))


def _teardown(children: Children) -> int:
    """Remove every node below ``children``, deepest first.

    Returns:
        Number of nodes removed
    """
    nodes = []
    stack = list(children.values())
    while stack:
        node = stack.pop()
        nodes.append(node)
        stack.extend(node.children.values())

    # Every node is listed after its parent, so reversed order clears
    # children before the node that holds them.
    for node in reversed(nodes):
        node.children.clear()
    children.clear()
    return len(nodes)


class TrieStore:
    """Thread-safe hierarchical key-value store.

    Each key is split on "/" and every segment maps to one Node. Values are
    strings; a blank or None value is a tombstone. All operations on one
    store are serialized by a lock owned by that store.
    """

    def __init__(self, metrics: Optional[MetricsRecorder] = None):
        """Initialize an empty store.

        Args:
            metrics: Recorder for per-call timings (a disabled one by default)
        """
        self._roots: Children = {}
        self._lock = threading.Lock()
        self._metrics = metrics if metrics is not None else MetricsRecorder()

    @property
    def metrics(self) -> MetricsRecorder:
        return self._metrics

    def add(self, key: str, value: Optional[str]) -> bool:
        """Set, overwrite or clear the value at a key.

        Missing nodes along the path are created for a present value. A
        tombstone on a path that does not exist changes nothing. When the
        cleared node has no children it is removed from its parent; its
        ancestors are left in place even if they end up empty.

        Args:
            key: Slash-delimited key
            value: The value to store; None or blank clears it

        Returns:
            False if the key was rejected, True otherwise
        """
        with self._metrics.track("Add", key) as probe:
            if not is_valid_key(key):
                probe.fail()
                return False

            segments = split_key(key)
            value = normalize_value(value)
            with self._lock:
                probe.processed_items = self._set(segments, value)

            logger.debug("add %r (%s)", key, "set" if value is not None else "clear")
            return True

    def select(self, key: str) -> Tuple[Optional[str], Optional[str]]:
        """Look up the value at an exact key.

        Args:
            key: Slash-delimited key

        Returns:
            Tuple of (key, value); value is None when the key is invalid,
            missing or cleared
        """
        with self._metrics.track("Select", key) as probe:
            if not is_valid_key(key):
                probe.fail()
                return key, None

            with self._lock:
                node, probe.processed_items = self._find(split_key(key))
                value = node.value if node is not None else None
            return key, value

    def list_all(self) -> Dict[str, str]:
        """Return every key holding a value.

        Returns:
            Dict of full key to value, in pre-order insertion order
        """
        with self._metrics.track("ListAll") as probe:
            with self._lock:
                output = dict(_iter_values("", self._roots))
            probe.processed_items = len(output)
            return output

    def list_dir(self, key: str) -> Optional[Dict[str, str]]:
        """Return the values stored at and below a key.

        The node at ``key`` comes first under the literal key if it holds a
        value, followed by its subtree under ``key + "/"``.

        Args:
            key: Slash-delimited directory key

        Returns:
            Dict of full key to value, empty if the path does not exist,
            or None if the key is invalid
        """
        with self._metrics.track("ListDir", key) as probe:
            if not is_valid_key(key):
                probe.fail()
                return None

            output: Dict[str, str] = {}
            with self._lock:
                node, visited = self._find(split_key(key))
                if node is not None:
                    if node.value is not None:
                        output[key] = node.value
                    output.update(_iter_values(key + SEPARATOR, node.children))
            probe.processed_items = visited + len(output)
            return output

    def remove_all(self) -> None:
        """Delete every node in the store."""
        with self._metrics.track("RemoveAll") as probe:
            with self._lock:
                probe.processed_items = _teardown(self._roots)
            logger.debug("remove_all dropped %d nodes", probe.processed_items)

    def remove_dir(self, key: str) -> bool:
        """Delete the node at a key together with its whole subtree.

        Args:
            key: Slash-delimited directory key

        Returns:
            True if a subtree was removed, False if the key was invalid or
            the path does not exist
        """
        with self._metrics.track("RemoveDir", key) as probe:
            if not is_valid_key(key):
                probe.fail()
                return False

            segments = split_key(key)
            with self._lock:
                parent, visited = self._locate(segments[:-1])
                if parent is None or segments[-1] not in parent:
                    probe.processed_items = visited
                    return False
                removed = _teardown(parent[segments[-1]].children) + 1
                del parent[segments[-1]]
                probe.processed_items = visited + removed

            logger.debug("remove_dir %r dropped %d nodes", key, removed)
            return True

    def stats(self) -> Dict[str, int]:
        """Get store statistics.

        Returns:
            Dictionary with 'nodes' (resident nodes, including valueless
            directory nodes) and 'values' (keys holding a value)
        """
        with self._lock:
            nodes = 0
            values = 0
            stack = list(self._roots.values())
            while stack:
                node = stack.pop()
                nodes += 1
                if node.value is not None:
                    values += 1
                stack.extend(node.children.values())

            return {
                'nodes': nodes,
                'values': values
            }

    def _set(self, segments: List[str], value: Optional[str]) -> int:
        """Apply one add() to the tree. Caller holds the lock.

        Returns:
            Number of sibling nodes scanned on the way down
        """
        processed = 0
        children = self._roots
        for segment in segments[:-1]:
            processed += len(children)
            node = children.get(segment)
            if node is None:
                if value is None:
                    # Clearing a missing path creates nothing, so no valueless
                    # childless directory is left behind.
                    return processed
                node = Node(segment)
                children[segment] = node
            children = node.children

        last = segments[-1]
        processed += len(children)
        node = children.get(last)
        if node is None:
            if value is not None:
                children[last] = Node(last, value)
            return processed

        node.value = value
        # Only the node touched here is pruned; ancestors stay.
        if node.is_empty():
            del children[last]
        return processed

    def _locate(self, segments: List[str]) -> Tuple[Optional[Children], int]:
        """Find the children mapping of the node at ``segments``.

        An empty segment list addresses the top level. Caller holds the lock.

        Returns:
            Tuple of (children mapping or None if the path is missing,
            nodes visited)
        """
        children = self._roots
        visited = 0
        for segment in segments:
            node = children.get(segment)
            if node is None:
                return None, visited
            visited += 1
            children = node.children
        return children, visited

    def _find(self, segments: List[str]) -> Tuple[Optional[Node], int]:
        """Find the node at ``segments``. Caller holds the lock."""
        parent, visited = self._locate(segments[:-1])
        if parent is None:
            return None, visited
        node = parent.get(segments[-1])
        if node is None:
            return None, visited
        return node, visited + 1
