"""Tests for Store."""

import logging

from changefx import PropertyChangeNotifier, PropertyChangeRecord, Store, flush, get_pending_count


class TestStore:
    def test_creation_from_schema(self):
        s = Store({"x": 10, "y": "hello"})
        assert s.get("x") == 10
        assert s.get("y") == "hello"

    def test_initial_overrides(self):
        s = Store({"x": 10, "y": "hello"}, initial={"x": 99})
        assert s.get("x") == 99
        assert s.get("y") == "hello"

    def test_get_nonexistent(self):
        s = Store({"x": 1})
        assert s.get("nope") is None

    def test_set(self):
        s = Store({"x": 0})
        s.set("x", 42)
        assert s.get("x") == 42

    def test_set_nonexistent_is_noop(self):
        s = Store({"x": 0})
        log = []
        s.changes.subscribe(log.append)
        s.set("nope", 99)  # no-op, no error
        assert s.get("nope") is None
        assert get_pending_count() == 0

    def test_set_records_change(self):
        s = Store({"count": 0})
        log = []
        s.changes.subscribe(log.append)
        s.set("count", 1)
        s.set("count", 2)
        flush()
        assert log == [
            (
                PropertyChangeRecord(s, "count", 0, 1),
                PropertyChangeRecord(s, "count", 1, 2),
            )
        ]

    def test_update_delivers_single_batch(self):
        s = Store({"x": 0, "y": 0})
        log = []
        s.changes.subscribe(log.append)
        s.update({"x": 1, "y": 2})
        # update() is an action: the batch arrives when it returns
        assert log == [
            (
                PropertyChangeRecord(s, "x", 0, 1),
                PropertyChangeRecord(s, "y", 0, 2),
            )
        ]

    def test_keys(self):
        s = Store({"a": 1, "b": 2})
        assert s.keys() == ["a", "b"]

    def test_is_property_change_notifier(self):
        assert isinstance(Store({}), PropertyChangeNotifier)


class TestReconcile:
    def test_adds_new_keys(self):
        s = Store({"a": 1})
        s.set("a", 42)
        added = s.reconcile({"a": 1, "b": 2})
        assert added == ["b"]
        assert s.get("a") == 42  # value preserved
        assert s.get("b") == 2

    def test_logs_info(self, caplog):
        s = Store({"a": 1})

        with caplog.at_level(logging.INFO, logger="changefx.store"):
            s.reconcile({"a": 1, "b": 2})

        assert "Reconciled" in caplog.text
        assert "1 new keys" in caplog.text

    def test_reconcile_records_nothing(self):
        s = Store({"a": 1})
        log = []
        s.changes.subscribe(log.append)
        s.reconcile({"b": 2})
        flush()
        assert log == []
