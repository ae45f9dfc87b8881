"""Textual integration for changefx. Opt-in — requires textual.

Textual coupling stays in this module; the core package never imports
textual. Pause depth per app is owned by this module, keyed by id(app);
an app has an entry exactly while at least one pause() block is open.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from changefx._turn import set_scheduler

logger = logging.getLogger("changefx.textual")

_pause_depth: dict[int, int] = {}


@contextmanager
def pause(app):
    """Hold back change batches while widgets are being replaced.

    Pauses nest; batches resume when the outermost block exits. Batches
    skipped while paused are not replayed.
    """
    key = id(app)
    _pause_depth[key] = _pause_depth.get(key, 0) + 1
    try:
        yield
    finally:
        remaining = _pause_depth.pop(key) - 1
        if remaining:
            _pause_depth[key] = remaining


def is_safe(app) -> bool:
    """Can batches reach the widget tree right now?"""
    if not app.is_running:
        return False
    return id(app) not in _pause_depth


def install_scheduler(app) -> None:
    """Deliver change batches right after the app's current message.

    Textual runs on asyncio, so the default scheduler already works inside
    the app; call_next keeps deliveries ordered with the app's own messages.
    """
    set_scheduler(app.call_next)


def subscribe(app, notifier, callback):
    """Subscribe callback to notifier.changes, guarded for Textual widgets.

    Batches are skipped while the app is paused or not running, NoMatches
    from widget queries is swallowed, and batches delivered on another
    thread are marshaled with call_from_thread. Returns the disposer.
    """
    _main = threading.get_ident()

    def _guarded(batch):
        if not is_safe(app):
            logger.debug("Skipped batch of %d changes: app not safe", len(batch))
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, batch)
        else:
            _safe(batch)

    def _safe(batch):
        try:
            callback(batch)
        except NoMatches:
            pass

    return notifier.changes.subscribe(_guarded)
