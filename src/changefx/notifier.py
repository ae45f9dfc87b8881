"""Change notifiers — batched, deferred delivery of change records.

A ChangeNotifier collects records passed to notify_change() and delivers
them to subscribers of `changes` as one batch per processing turn. The
first notify_change() of a turn schedules a single delivery task through
the turn scheduler; later calls in the same turn only append.

Nothing is allocated until someone subscribes, and everything is dropped
again when the last subscriber leaves:

    notifier = PropertyChangeNotifier()
    unsubscribe = notifier.changes.subscribe(print)
    notifier.notify_property_change("x", 1, 2)
    notifier.notify_property_change("y", 1, 2)
    # end of turn: print receives one tuple holding both records
    unsubscribe()
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Generic, Sequence, TypeVar

from changefx._turn import schedule_task, wake
from changefx.records import ChangeRecord, PropertyChangeRecord
from changefx.stream import ChangeStream

logger = logging.getLogger("changefx.notifier")

C = TypeVar("C", bound=ChangeRecord)
T = TypeVar("T")


class UnsupportedOperation(NotImplementedError):
    """Raised when a notifier cannot build the requested kind of record."""


def _freeze(queue: list[C]) -> Sequence[C]:
    # Under `python -O` the detached list is handed out as-is.
    if __debug__:
        return tuple(queue)
    return queue


class ChangeNotifier(Generic[C]):
    """Queues change records and delivers them as one batch per turn.

    Usable as a base class or held as a delegate. Subclasses may override
    observed() and unobserved(); the channel and queue are released before
    unobserved() runs regardless of what an override does.
    """

    def __init__(self) -> None:
        self._changes: ChangeStream[Sequence[C]] | None = None
        self._queue: list[C] | None = None
        self._scheduled = False
        self._lock = threading.RLock()

    @property
    def changes(self) -> ChangeStream[Sequence[C]]:
        """Stream of change batches. Created on first access."""
        with self._lock:
            if self._changes is None:
                self._changes = ChangeStream(
                    on_listen=self._on_listen,
                    on_cancel=self._on_cancel,
                    renew=lambda: self.changes,
                )
            return self._changes

    @property
    def has_observers(self) -> bool:
        """Whether `changes` has at least one active subscriber.

        Check this before building expensive records.
        """
        stream = self._changes
        return stream is not None and stream.has_listener

    def observed(self) -> None:
        """Called when `changes` gains its first subscriber."""

    def unobserved(self) -> None:
        """Called after `changes` loses its last subscriber and state is released."""

    def notify_change(self, change: C | None = None) -> None:
        """Schedule change to be delivered at the end of the turn.

        Without a change, subscribers receive ChangeRecord.ANY unless some
        record was queued in the same turn. Does nothing without observers.
        """
        if not self.has_observers:
            return
        with self._lock:
            if change is not None:
                if self._queue is None:
                    self._queue = []
                self._queue.append(change)
            pending = self._scheduled
            self._scheduled = True
        if pending:
            # A delivery parked outside any loop is handed on once one runs.
            wake()
            return
        logger.debug("Scheduled delivery for %r", self)
        schedule_task(self.deliver_changes)

    def deliver_changes(self) -> bool:
        """Emit queued changes now if a delivery is pending.

        Returns True if a batch was emitted. Safe to call at any time.
        """
        with self._lock:
            if not self._scheduled:
                return False
            self._scheduled = False
            stream = self._changes
            if stream is None or not stream.has_listener:
                logger.debug("Dropped delivery for %r: no observers left", self)
                return False
            if self._queue:
                batch = _freeze(self._queue)
            else:
                batch = ChangeRecord.ANY
            self._queue = None
        stream.emit(batch)
        return True

    def notify_property_change(self, name: str, old_value: T, new_value: T) -> T:
        raise UnsupportedOperation(
            f"{type(self).__name__} does not build property change records; "
            "use PropertyChangeNotifier"
        )

    def _on_listen(self) -> None:
        self.observed()

    def _on_cancel(self) -> None:
        self._release()
        self.unobserved()

    def _release(self) -> None:
        with self._lock:
            stream = self._changes
            self._changes = None
            self._queue = None
        if stream is not None:
            stream.close()
        logger.debug("Released change stream of %r", self)


class PropertyChangeNotifier(ChangeNotifier[PropertyChangeRecord]):
    """ChangeNotifier that records named field changes.

    owner is the object named in emitted records. It defaults to the
    notifier; pass the outer object when the notifier is a delegate.
    """

    def __init__(self, owner: Any = None) -> None:
        super().__init__()
        self._owner = self if owner is None else owner

    def notify_property_change(self, name: str, old_value: T, new_value: T) -> T:
        """Record that name changed from old_value to new_value.

        Equal values are ignored. Returns new_value so callers can write
        `self._x = self.notify_property_change("x", self._x, value)`.
        """
        if self.has_observers and old_value is not new_value and old_value != new_value:
            self.notify_change(
                PropertyChangeRecord(self._owner, name, old_value, new_value)
            )
        return new_value
