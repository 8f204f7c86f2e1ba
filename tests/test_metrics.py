"""Metrics recording tests."""

import threading

import pytest

from kvtree import MemoryDb, MetricItem, MetricsRecorder, TrieStore


class TestRecorder:
    def test_disabled_by_default(self):
        assert MetricsRecorder().enabled is False
        assert MemoryDb().is_metric_enabled() is False

    def test_enable_disable(self):
        db = MemoryDb()
        db.enable_metric()
        assert db.is_metric_enabled() is True
        db.disable_metric()
        assert db.is_metric_enabled() is False

    def test_nothing_recorded_when_disabled(self):
        recorder = MetricsRecorder()
        store = TrieStore(recorder)
        store.add("a", "1")
        store.select("a")
        assert recorder.dump() == []

    def test_track_records_probe_values(self, recorder):
        with recorder.track("Custom", "k") as probe:
            probe.processed_items = 7
        [item] = recorder.dump()
        assert (item.type, item.key, item.processed_items, item.comment) == ("Custom", "k", 7, "Done")
        assert item.elapsed_ms >= 0

    def test_track_records_failure_and_reraises(self, recorder):
        with pytest.raises(RuntimeError):
            with recorder.track("Boom", None, "/Replace=true"):
                raise RuntimeError("fault")
        [item] = recorder.dump()
        assert item.comment == "Failed/Replace=true"

    def test_dump_drains_exactly_once(self, recorder):
        recorder.record(MetricItem("Add", "a"))
        recorder.record(MetricItem("Add", "b"))
        assert [i.key for i in recorder.dump()] == ["a", "b"]
        assert recorder.dump() == []

    def test_concurrent_record_and_dump_loses_nothing(self, recorder):
        drained = []

        def producer():
            for i in range(200):
                recorder.record(MetricItem("Add", str(i)))

        def consumer():
            for _ in range(50):
                drained.extend(recorder.dump())

        threads = [threading.Thread(target=producer) for _ in range(4)]
        threads.append(threading.Thread(target=consumer))
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        drained.extend(recorder.dump())

        assert len(drained) == 800
        assert len({id(item) for item in drained}) == 800


class TestInstrumentedOperations:
    def test_tree_operations_are_recorded(self, recorder):
        store = TrieStore(recorder)
        store.add("a/b", "1")
        store.select("a/b")
        store.list_all()
        store.list_dir("a")
        store.remove_dir("a")
        store.remove_all()

        items = recorder.dump()
        assert [i.type for i in items] == ["Add", "Select", "ListAll", "ListDir", "RemoveDir", "RemoveAll"]
        assert all(i.comment == "Done" for i in items)
        assert items[1].processed_items == 2
        assert items[2].processed_items == 1

    def test_invalid_key_is_recorded_as_failed(self, recorder):
        store = TrieStore(recorder)
        store.add("", "v")
        store.list_dir(None)
        items = recorder.dump()
        assert [(i.type, i.comment) for i in items] == [("Add", "Failed"), ("ListDir", "Failed")]

    def test_remove_all_counts_nodes(self, recorder):
        store = TrieStore(recorder)
        store.add("a/b/c", "1")
        store.add("a/d", "2")
        recorder.dump()
        store.remove_all()
        [item] = recorder.dump()
        assert item.processed_items == 4

    def test_persistence_comments(self, db_file):
        db = MemoryDb(db_file, metrics_enabled=True)
        db.add("k", "v")
        db.save("k")
        db.load(False, "k")
        db.load_all(True)
        db.purge("k")

        outer = [i for i in db.dump_metrics() if i.type in ("Save", "Load", "LoadAll", "Purge")]
        assert [(i.type, i.comment) for i in outer] == [
            ("Save", "Done"),
            ("Load", "Failed/Replace=false"),
            ("LoadAll", "Done/Replace=true"),
            ("Purge", "Done"),
        ]
        assert outer[2].key is None
        assert outer[2].processed_items == 1

    def test_metrics_not_blocked_by_tree_lock(self, recorder):
        store = TrieStore(recorder)
        with store._lock:
            recorder.record(MetricItem("Manual"))
            assert len(recorder.dump()) == 1
