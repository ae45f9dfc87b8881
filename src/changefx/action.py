"""Explicit processing turns for synchronous code.

Outside an event loop nothing marks where a turn ends, so code that wants
its notifications delivered says so: deliveries scheduled inside
`with turn():` or an @action-decorated call are held back and run, in
scheduling order, when the outermost scope exits.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, ParamSpec, TypeVar

from changefx import _turn

logger = logging.getLogger("changefx.action")

P = ParamSpec("P")
R = TypeVar("R")


class turn:
    """Context manager delimiting a processing turn.

    Usage:
        with turn():
            notifier.notify_change(a)
            notifier.notify_change(b)
            # nothing delivered yet
        # subscribers received (a, b) here

    If the body raises, pending deliveries still run; a subscriber error
    during that unwinding is logged and the body's exception propagates.
    """

    def __enter__(self) -> turn:
        _turn.begin_turn()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            _turn.end_turn()
            return False
        try:
            _turn.end_turn()
        except Exception:
            logger.exception("Delivery failed while unwinding a turn")
        return False


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: each call to fn is one processing turn.

    Usage:
        @action
        def rename(person):
            person.first = "Grace"
            person.last = "Hopper"
            # subscribers get one batch with both records after rename()
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with turn():
            return fn(*args, **kwargs)

    return wrapper
