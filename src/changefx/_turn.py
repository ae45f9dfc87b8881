"""Processing-turn scheduler — defers delivery tasks to the end of the turn.

A notifier never delivers inside notify_change(). It hands a zero-argument
task to schedule_task(), which runs it once the currently executing
synchronous code has finished. Where that is depends on context:

1. Inside an explicit turn (`with turn():` or `@action`), tasks queue up
   and run when the outermost turn exits.
2. If a scheduler was installed with set_scheduler(), it receives the task.
3. If an asyncio loop is running in this thread, the task goes to
   loop.call_soon().
4. Otherwise the task is parked until flush(), or until a later call finds
   a loop or scheduler to hand the parked tasks to.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable

logger = logging.getLogger("changefx._turn")

Task = Callable[[], object]

# Turn depth counter. When > 0, tasks are deferred to the outermost exit.
_turn_depth: int = 0

# Parked tasks, in scheduling order.
_pending: deque[Task] = deque()

# Optional replacement for the asyncio/pending fallback.
_scheduler: Callable[[Task], object] | None = None


def set_scheduler(scheduler: Callable[[Task], object] | None) -> None:
    """Install the scheduler used for deferred delivery tasks.

    The scheduler is called with a zero-argument task and must run it later,
    after the caller's synchronous code has returned:
        changefx.set_scheduler(app.call_next)

    Pass None to restore the default (running asyncio loop, else flush()).
    """
    global _scheduler
    _scheduler = scheduler


def begin_turn() -> None:
    """Enter an explicit turn. Nested turns are supported."""
    global _turn_depth
    _turn_depth += 1


def end_turn() -> None:
    """Exit a turn. When the outermost turn exits, run pending tasks."""
    global _turn_depth
    _turn_depth -= 1
    if _turn_depth == 0:
        flush()


def in_turn() -> bool:
    return _turn_depth > 0


def _hand_off(task: Task) -> bool:
    """Give task to the installed scheduler or the running loop."""
    if _scheduler is not None:
        _scheduler(task)
        return True
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return False
    loop.call_soon(task)
    return True


def schedule_task(task: Task) -> None:
    """Run task later in the current processing turn."""
    if _turn_depth > 0:
        _pending.append(task)
        return
    if _pending:
        # Keep order behind tasks parked earlier; they run together.
        _pending.append(task)
        wake()
        return
    if not _hand_off(task):
        logger.debug("No running event loop, %r waits for flush()", task)
        _pending.append(task)


def wake() -> None:
    """Hand parked tasks to a loop or scheduler if one is available now.

    Notifiers call this when a delivery is already scheduled, so a task
    parked outside any loop still runs at the next turn boundary once one
    exists.
    """
    if not _pending or _turn_depth > 0:
        return
    if _hand_off(flush):
        logger.debug("Handed %d parked tasks to the running turn", len(_pending))


def flush() -> int:
    """Run all pending tasks, including ones scheduled while flushing.

    A raising task does not strand the ones behind it: every task runs,
    then the first error is re-raised and later ones are logged.

    Returns the number of tasks run.
    """
    count = 0
    error: BaseException | None = None
    while _pending:
        task = _pending.popleft()
        count += 1
        try:
            task()
        except Exception as exc:
            if error is None:
                error = exc
            else:
                logger.exception("Pending task %r failed", task)
    if count:
        logger.debug("Flushed %d pending tasks", count)
    if error is not None:
        raise error
    return count


def get_pending_count() -> int:
    """Number of parked tasks. Useful for testing."""
    return len(_pending)


def reset() -> None:
    """Drop pending tasks and restore defaults. Intended for tests."""
    global _turn_depth, _scheduler
    _turn_depth = 0
    _scheduler = None
    _pending.clear()
