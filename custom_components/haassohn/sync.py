"""Mirror the stove's status document into the state point store.

The document is an arbitrarily nested JSON object. Every leaf (scalar or
array) becomes one state point named by its path, e.g.
``{"meta": {"nonce": "x"}}`` → ``device.meta.nonce``. Nested objects are
descended and never become points themselves.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .const import (
    POINT_ECO_EDITABLE,
    POINT_ECO_MODE,
    POINT_HW_VERSION,
    POINT_NONCE,
    POINT_SW_VERSION,
)
from .store import StatePointStore, StateStoreError

if TYPE_CHECKING:
    from .auth import NonceManager
    from .coordinator import StoveState

_LOGGER = logging.getLogger(__name__)

ROOT = "device"


class NodeKind(Enum):
    """Kind of a node in the status document."""

    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


def classify(value: Any) -> NodeKind:
    """Return the node kind of a decoded JSON value."""
    if isinstance(value, dict):
        return NodeKind.OBJECT
    if isinstance(value, (list, tuple)):
        return NodeKind.ARRAY
    return NodeKind.SCALAR


@dataclass(frozen=True)
class Leaf:
    """A leaf of the status document."""

    point_id: str
    kind: NodeKind
    value: Any


def walk_document(document: dict[str, Any], prefix: str = "") -> Iterator[Leaf]:
    """Yield every leaf of document in document order.

    Uses an explicit stack of iterators so nesting depth is not bound by
    the interpreter's recursion limit.
    """
    stack = [(prefix, iter(document.items()))]
    while stack:
        path, items = stack[-1]
        for key, value in items:
            kind = classify(value)
            child = f"{path}.{key}" if path else str(key)
            if kind is NodeKind.OBJECT:
                stack.append((child, iter(value.items())))
                break
            yield Leaf(f"{ROOT}.{child}", kind, value)
        else:
            stack.pop()


def coerce(leaf: Leaf) -> Any:
    """Return the value stored for a leaf.

    Arrays are stored as compact JSON, scalars unchanged.
    """
    if leaf.kind is NodeKind.ARRAY:
        return json.dumps(leaf.value, separators=(",", ":"))
    return leaf.value


def values_differ(old: Any, new: Any) -> bool:
    """Compare like a strict equality check (True is not 1)."""
    return type(old) is not type(new) or old != new


class StateSynchronizer:
    """Apply status documents to the state point store."""

    def __init__(
        self, store: StatePointStore, nonce: NonceManager, state: StoveState
    ) -> None:
        """Initialize the synchronizer."""
        self._store = store
        self._nonce = nonce
        self._state = state

    async def async_sync(self, document: dict[str, Any], prefix: str = "") -> None:
        """Publish every changed leaf of the document.

        A store failure terminates the integration: it means the storage
        itself is broken, so no further point is processed.
        """
        _LOGGER.debug("Syncing state of the device")
        for leaf in walk_document(document, prefix):
            try:
                await self._async_sync_leaf(leaf)
            except StateStoreError as ex:
                _LOGGER.error("Error processing state %s: %s", leaf.point_id, ex)
                self._state.terminated = True
                return

    async def _async_sync_leaf(self, leaf: Leaf) -> None:
        point_id = leaf.point_id
        value = coerce(leaf)
        _LOGGER.debug("Processing state: %s with value: %s", point_id, value)

        self._apply_side_effects(point_id, value)

        if await self._store.async_get_object(point_id) is None:
            _LOGGER.warning(
                "State %s does not exist. Please open an issue on GitHub", point_id
            )
            self._state.missing_state = True
        else:
            current = await self._store.async_get_state(point_id)
            if current is None:
                _LOGGER.debug("Initial setting of state %s to %s", point_id, value)
                await self._store.async_set_state(point_id, value, ack=True)
            elif values_differ(current.val, value):
                _LOGGER.debug(
                    "State changed for %s: %s (was: %s)", point_id, value, current.val
                )
                await self._store.async_set_state(point_id, value, ack=True)

        if point_id == POINT_ECO_EDITABLE:
            await self._async_update_eco_writable(bool(value))

    def _apply_side_effects(self, point_id: str, value: Any) -> None:
        if point_id == POINT_NONCE:
            self._nonce.update(value)
        elif point_id == POINT_HW_VERSION:
            self._state.hw_version = value
        elif point_id == POINT_SW_VERSION:
            self._state.sw_version = value

    async def _async_update_eco_writable(self, editable: bool) -> None:
        obj = await self._store.async_get_object(POINT_ECO_MODE)
        if obj is None or obj.write == editable:
            return
        _LOGGER.debug("Eco mode is now %s", "editable" if editable else "read-only")
        obj.write = editable
        await self._store.async_set_object(POINT_ECO_MODE, obj)
