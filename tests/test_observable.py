"""Tests for the Observable protocol, ObservableValue and observable_field."""

import pytest

from changefx import (
    ChangeNotifier,
    ObservableValue,
    PropertyChangeNotifier,
    PropertyChangeRecord,
    Store,
    UnsupportedOperation,
    flush,
    is_observable,
    observable_field,
    turn,
)


class TestIsObservable:
    def test_notifiers_are_observable(self):
        assert is_observable(ChangeNotifier())
        assert is_observable(PropertyChangeNotifier())
        assert is_observable(ObservableValue(0))
        assert is_observable(Store({}))

    def test_plain_object_is_not(self):
        assert not is_observable(object())

    def test_check_allocates_nothing(self):
        n = ChangeNotifier()
        assert is_observable(n)
        assert n._changes is None

    def test_forwarding_delegate(self):
        class Delegating:
            def __init__(self):
                self._notifier = PropertyChangeNotifier(owner=self)

            changes = property(lambda self: self._notifier.changes)
            has_observers = property(lambda self: self._notifier.has_observers)

            def observed(self):
                pass

            def unobserved(self):
                pass

            def notify_change(self, change=None):
                self._notifier.notify_change(change)

            def deliver_changes(self):
                return self._notifier.deliver_changes()

        d = Delegating()
        assert is_observable(d)
        assert d._notifier._changes is None


class TestObservableValue:
    def test_get_set(self):
        v = ObservableValue(42)
        assert v.get() == 42
        v.set(100)
        assert v.get() == 100

    def test_dedup(self):
        """Setting an equal value records nothing."""
        v = ObservableValue(42)
        log = []
        v.changes.subscribe(log.append)
        v.set(42)
        flush()
        assert log == []

    def test_batches_sets(self):
        v = ObservableValue("hello")
        log = []
        v.changes.subscribe(log.append)
        with turn():
            v.set("world")
            v.set("again")
        assert log == [
            (
                PropertyChangeRecord(v, "value", "hello", "world"),
                PropertyChangeRecord(v, "value", "world", "again"),
            )
        ]

    def test_set_without_observers(self):
        v = ObservableValue(1)
        v.set(2)
        assert v.get() == 2

    def test_repr(self):
        assert "ObservableValue(5)" in repr(ObservableValue(5))


class Person(PropertyChangeNotifier):
    name = observable_field("")
    age = observable_field(0)


class TestObservableField:
    def test_default(self):
        p = Person()
        assert p.name == ""
        assert p.age == 0

    def test_assignment_records_change(self):
        p = Person()
        log = []
        p.changes.subscribe(log.append)
        with turn():
            p.name = "Ada"
            p.age = 36
        assert log == [
            (
                PropertyChangeRecord(p, "name", "", "Ada"),
                PropertyChangeRecord(p, "age", 0, 36),
            )
        ]
        assert p.name == "Ada"
        assert p.age == 36

    def test_equal_assignment_records_nothing(self):
        p = Person()
        log = []
        p.changes.subscribe(log.append)
        with turn():
            p.age = 0
        assert log == []

    def test_instances_independent(self):
        a, b = Person(), Person()
        a.name = "Ada"
        assert b.name == ""

    def test_class_access_returns_descriptor(self):
        assert isinstance(Person.name, observable_field)

    def test_on_base_notifier_unsupported(self):
        class Plain(ChangeNotifier):
            flag = observable_field(False)

        with pytest.raises(UnsupportedOperation):
            Plain().flag = True
