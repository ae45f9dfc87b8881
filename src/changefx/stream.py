"""Broadcast change stream with listen/cancel hooks.

A ChangeStream pushes each emitted value to every active subscriber,
synchronously and in subscription order. Owners learn when the stream
gains its first subscriber (on_listen) and when it loses its last one
(on_cancel), which is how a notifier allocates and releases its state
lazily. map() and filter() derive streams that only stay attached to
their parent while they have subscribers themselves.

An owner that replaces a closed stream passes `renew`, which returns the
live replacement; subscribing to the closed stream, directly or through a
derived stream, then lands on the replacement.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Disposer = Callable[[], None]
Hook = Callable[[], None]


class _Subscription:
    __slots__ = ("callback", "active")

    def __init__(self, callback: Callable) -> None:
        self.callback = callback
        self.active = True


class ChangeStream(Generic[T]):
    """Push-based broadcast stream with first-listen / last-cancel hooks.

    The subscriber list is guarded by a per-stream lock; hooks and
    callbacks run outside it.
    """

    def __init__(
        self,
        on_listen: Hook | None = None,
        on_cancel: Hook | None = None,
        renew: Callable[[], ChangeStream[T]] | None = None,
    ) -> None:
        self._subscriptions: list[_Subscription] = []
        self._on_listen = on_listen
        self._on_cancel = on_cancel
        self._renew = renew
        self._closed = False
        self._lock = threading.RLock()

    @property
    def has_listener(self) -> bool:
        return bool(self._subscriptions)

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, value: T) -> None:
        """Push a value to all current subscribers."""
        with self._lock:
            if self._closed:
                return
            snapshot = tuple(self._subscriptions)
        # Subscriptions cancelled mid-emit are skipped.
        for sub in snapshot:
            if sub.active:
                sub.callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        with self._lock:
            if self._closed:
                if self._renew is None:
                    raise RuntimeError("cannot subscribe to a closed ChangeStream")
                live = None
            else:
                live = self
                sub = _Subscription(callback)
                first = not self._subscriptions
                self._subscriptions.append(sub)
        if live is None:
            return self._renew().subscribe(callback)
        if first and self._on_listen is not None:
            try:
                self._on_listen()
            except BaseException:
                self._drop(sub)
                raise

        def _unsubscribe() -> None:
            if self._drop(sub) and self._on_cancel is not None:
                self._on_cancel()

        return _unsubscribe

    def map(self, fn: Callable[[T], U]) -> ChangeStream[U]:
        """Transform values through fn."""
        return self._derive(lambda child, v: child.emit(fn(v)))

    def filter(self, fn: Callable[[T], bool]) -> ChangeStream[T]:
        """Only pass values where fn returns True."""
        return self._derive(lambda child, v: child.emit(v) if fn(v) else None)

    def close(self) -> None:
        """Drop every subscriber and stop emitting.

        Later subscribers are sent to the renewed stream, or refused when
        there is none.
        """
        with self._lock:
            self._closed = True
            for sub in self._subscriptions:
                sub.active = False
            self._subscriptions.clear()

    def _drop(self, sub: _Subscription) -> bool:
        """Remove sub. Returns True if that left the stream without subscribers."""
        with self._lock:
            if not sub.active:
                return False  # already removed
            sub.active = False
            self._subscriptions.remove(sub)
            return not self._subscriptions

    def _derive(self, forward: Callable[[ChangeStream, T], None]) -> ChangeStream:
        """Build a child stream attached to the parent only while it has listeners."""
        parent_disposer: list[Disposer | None] = [None]

        def _attach() -> None:
            parent_disposer[0] = self.subscribe(lambda v: forward(child, v))

        def _detach() -> None:
            if parent_disposer[0] is not None:
                parent_disposer[0]()
                parent_disposer[0] = None

        child: ChangeStream = ChangeStream(on_listen=_attach, on_cancel=_detach)
        return child

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"{len(self._subscriptions)} subscribers"
        return f"ChangeStream({state})"
