"""State point store for Haas+Sohn stove integration.

Holds one value per known state point together with an acknowledgement
flag, plus per-point metadata (``PointObject``). Values written with
``ack=False`` are commands waiting for the stove; the coordinator subscribes
to them and acknowledges once the stove accepted the change.

Only points defined up front exist. Looking up anything else returns None,
which the synchronizer reports as a missing state.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from .const import STORAGE_SAVE_DELAY

_LOGGER = logging.getLogger(__name__)


class StateStoreError(HomeAssistantError):
    """The state point store cannot serve a request."""


@dataclass
class PointObject:
    """Metadata of a state point.

    Attributes:
        name: Human readable name.
        type: One of "number", "boolean", "string".
        unit: Unit of measurement, if any.
        write: Whether the point accepts commands.
    """

    name: str
    type: str
    unit: str | None = None
    write: bool = False


@dataclass
class PointState:
    """Value of a state point."""

    val: Any
    ack: bool
    ts: float = dataclasses.field(default_factory=time.time)


StateListener = Callable[[str, PointState], None]


class StatePointStore:
    """In-memory state point store persisted through Home Assistant storage."""

    def __init__(
        self,
        objects: dict[str, PointObject],
        storage: Store | None = None,
    ) -> None:
        """Initialize the store with its point definitions."""
        self._objects = objects
        self._states: dict[str, PointState] = {}
        self._storage = storage
        self._listeners: list[StateListener] = []
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise StateStoreError("State point store is closed")

    async def async_load(self) -> None:
        """Restore acknowledged values and writability from storage."""
        if self._storage is None:
            return
        data = await self._storage.async_load()
        if not data:
            return
        for point_id, saved in data.get("states", {}).items():
            if point_id in self._objects:
                self._states[point_id] = PointState(
                    val=saved["val"], ack=True, ts=saved.get("ts", 0.0)
                )
        for point_id, write in data.get("writable", {}).items():
            if point_id in self._objects:
                self._objects[point_id].write = write
        _LOGGER.debug("Restored %d state points from storage", len(self._states))

    async def async_close(self) -> None:
        """Flush pending writes and refuse further requests."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        if self._storage is not None:
            await self._storage.async_save(self._data_to_save())

    def _data_to_save(self) -> dict[str, Any]:
        return {
            "states": {
                point_id: {"val": state.val, "ts": state.ts}
                for point_id, state in self._states.items()
                if state.ack
            },
            "writable": {
                point_id: obj.write for point_id, obj in self._objects.items()
            },
        }

    def _schedule_save(self) -> None:
        if self._storage is not None:
            self._storage.async_delay_save(self._data_to_save, STORAGE_SAVE_DELAY)

    @property
    def point_ids(self) -> list[str]:
        """Return all defined point ids."""
        return list(self._objects)

    async def async_get_object(self, point_id: str) -> PointObject | None:
        """Return a copy of the point's metadata, or None if undefined."""
        self._check_open()
        obj = self._objects.get(point_id)
        return dataclasses.replace(obj) if obj is not None else None

    async def async_set_object(self, point_id: str, obj: PointObject) -> None:
        """Replace the metadata of a defined point."""
        self._check_open()
        if point_id not in self._objects:
            raise StateStoreError(f"Object {point_id} does not exist")
        self._objects[point_id] = dataclasses.replace(obj)
        self._schedule_save()

    async def async_get_state(self, point_id: str) -> PointState | None:
        """Return the current state of a point, or None if never set."""
        self._check_open()
        return self._states.get(point_id)

    async def async_set_state(
        self, point_id: str, value: Any, ack: bool = False
    ) -> None:
        """Set a point's value and notify listeners."""
        self._check_open()
        if point_id not in self._objects:
            raise StateStoreError(f"State {point_id} does not exist")
        state = PointState(val=value, ack=ack)
        self._states[point_id] = state
        if ack:
            self._schedule_save()
        for listener in list(self._listeners):
            try:
                listener(point_id, state)
            except Exception:
                _LOGGER.exception("Exception in state listener for %s", point_id)

    def get_value(self, point_id: str) -> Any:
        """Return the cached value of a point (None if unknown)."""
        state = self._states.get(point_id)
        return state.val if state is not None else None

    def get_object(self, point_id: str) -> PointObject | None:
        """Return the live metadata of a point for read-only use."""
        return self._objects.get(point_id)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state changes, return an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
