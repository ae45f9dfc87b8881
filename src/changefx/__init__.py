"""changefx: batched, end-of-turn change notifications for Python objects."""

from importlib.metadata import version as _version

__version__ = _version("changefx")

from changefx._turn import flush, get_pending_count, set_scheduler
from changefx.records import ChangeRecord, PropertyChangeRecord
from changefx.stream import ChangeStream
from changefx.notifier import ChangeNotifier, PropertyChangeNotifier, UnsupportedOperation
from changefx.observable import Observable, ObservableValue, is_observable, observable_field
from changefx.action import action, turn
from changefx.store import Store
# textual NOT auto-imported — opt-in only

__all__ = [
    "ChangeRecord",
    "PropertyChangeRecord",
    "ChangeStream",
    "ChangeNotifier",
    "PropertyChangeNotifier",
    "UnsupportedOperation",
    "Observable",
    "ObservableValue",
    "is_observable",
    "observable_field",
    "action",
    "turn",
    "flush",
    "get_pending_count",
    "set_scheduler",
    "Store",
]
