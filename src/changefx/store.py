"""Store — key-based value container that publishes per-key changes.

A Store holds a schema of named values. Every effective set() queues a
PropertyChangeRecord named after the key; update() runs as one action so
subscribers see the whole update as a single batch. reconcile() supports
schema evolution: add new keys without losing existing values.
"""

from __future__ import annotations

import logging

from changefx.action import action
from changefx.notifier import PropertyChangeNotifier

logger = logging.getLogger("changefx.store")


class Store(PropertyChangeNotifier):
    """Key-based value container with batched change records."""

    def __init__(self, schema: dict[str, object], initial: dict | None = None) -> None:
        super().__init__()
        self._values: dict[str, object] = {}
        for key, default in schema.items():
            self._values[key] = initial.get(key, default) if initial else default

    def get(self, key: str) -> object:
        return self._values.get(key)

    def set(self, key: str, value: object) -> None:
        if key in self._values:
            self._values[key] = self.notify_property_change(key, self._values[key], value)

    @action
    def update(self, values: dict) -> None:
        for key, value in values.items():
            self.set(key, value)

    def keys(self) -> list[str]:
        return list(self._values)

    def reconcile(self, schema: dict[str, object]) -> list[str]:
        """Schema evolution: add new keys with their defaults.

        Existing values are untouched. Returns the keys that were added.
        """
        new_keys = [key for key in schema if key not in self._values]
        for key in new_keys:
            self._values[key] = schema[key]
        logger.info("Reconciled: %d new keys, %d total", len(new_keys), len(self._values))
        return new_keys

    def __repr__(self) -> str:
        return f"Store({self._values!r})"
