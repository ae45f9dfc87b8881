"""Change records — the units of information carried in a batch.

A record describes one mutation. The notifier never looks inside a record;
it only queues records in order and hands them to subscribers as a batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


class ChangeRecord:
    """Base type for all change records.

    ChangeRecord.ANY is the batch delivered when a change was signalled
    without a record. ChangeRecord.NONE is the empty batch.
    """

    __slots__ = ()

    ANY: ClassVar[tuple[ChangeRecord, ...]]
    NONE: ClassVar[tuple[ChangeRecord, ...]] = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


ChangeRecord.ANY = (ChangeRecord(),)


@dataclass(frozen=True, slots=True)
class PropertyChangeRecord(ChangeRecord):
    """A named field on an object changed from old_value to new_value."""

    object: Any
    name: str
    old_value: Any
    new_value: Any

    def __repr__(self) -> str:
        return (
            f"PropertyChangeRecord({self.name!r}, "
            f"old={self.old_value!r}, new={self.new_value!r})"
        )
