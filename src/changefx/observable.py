"""Observable objects — the protocol and small building blocks on top of it.

Observable is the structural interface every notifier satisfies. Types
that want change batches without inheriting from a notifier can hold one
and forward these members to it.

ObservableValue is a single-value holder and observable_field a descriptor;
both turn plain assignments into PropertyChangeRecords.
"""

from __future__ import annotations

import inspect
from typing import Any, Generic, Protocol, Sequence, TypeVar, overload

from changefx.notifier import PropertyChangeNotifier
from changefx.records import ChangeRecord
from changefx.stream import ChangeStream

T = TypeVar("T")

_UNSET = object()


class Observable(Protocol):
    """Anything that publishes batches of change records on `changes`."""

    @property
    def changes(self) -> ChangeStream[Sequence[ChangeRecord]]: ...

    @property
    def has_observers(self) -> bool: ...

    def observed(self) -> None: ...

    def unobserved(self) -> None: ...

    def notify_change(self, change: ChangeRecord | None = None) -> None: ...

    def deliver_changes(self) -> bool: ...


_OBSERVABLE_MEMBERS = (
    "changes",
    "has_observers",
    "observed",
    "unobserved",
    "notify_change",
    "deliver_changes",
)


def is_observable(obj: object) -> bool:
    """Whether obj provides every Observable member.

    Looks members up statically, so no property runs and no stream is
    allocated by the check.
    """
    for name in _OBSERVABLE_MEMBERS:
        try:
            inspect.getattr_static(obj, name)
        except AttributeError:
            return False
    return True


class ObservableValue(PropertyChangeNotifier, Generic[T]):
    """A single value whose changes are published as "value" records."""

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Write a new value. Equal values are not recorded."""
        self._value = self.notify_property_change("value", self._value, value)

    def __repr__(self) -> str:
        return f"ObservableValue({self._value!r})"


class observable_field(Generic[T]):
    """Descriptor that records assignments on a PropertyChangeNotifier.

    Usage:
        class Person(PropertyChangeNotifier):
            name = observable_field("")

        p = Person()
        p.changes.subscribe(print)
        p.name = "Ada"  # queues PropertyChangeRecord(p, "name", "", "Ada")
    """

    def __init__(self, default: T) -> None:
        self.default = default
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self._slot = f"_field_{name}"

    @overload
    def __get__(self, instance: None, owner: type) -> observable_field[T]: ...

    @overload
    def __get__(self, instance: Any, owner: type) -> T: ...

    def __get__(self, instance, owner):
        if instance is None:
            return self
        value = instance.__dict__.get(self._slot, _UNSET)
        return self.default if value is _UNSET else value

    def __set__(self, instance: PropertyChangeNotifier, value: T) -> None:
        old = self.__get__(instance, type(instance))
        instance.__dict__[self._slot] = instance.notify_property_change(self.name, old, value)
