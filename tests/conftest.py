"""Shared test configuration for kvtree."""

import pytest

from kvtree import MemoryDb, MetricsRecorder, TrieStore


@pytest.fixture
def store():
    """Provide an empty store with metrics switched off."""
    return TrieStore()


@pytest.fixture
def db_file(tmp_path):
    """Path of a storage file that does not exist yet."""
    return str(tmp_path / "vars.json")


@pytest.fixture
def db(db_file):
    """Provide a MemoryDb backed by a fresh file."""
    return MemoryDb(db_file)


@pytest.fixture
def recorder():
    """Provide an enabled metrics recorder."""
    return MetricsRecorder(enabled=True)


@pytest.fixture
def sample_tree(store):
    """Store holding the a/b/c, a/b/d, a/e sample entries."""
    store.add("a/b/c", "1")
    store.add("a/b/d", "2")
    store.add("a/e", "3")
    return store
