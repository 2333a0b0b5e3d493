"""Coordinator for Haas+Sohn pellet stove integration."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aiohttp

from homeassistant.const import EntityCategory
from homeassistant.helpers.device_registry import DeviceInfo

from .api import HaasSohnClient, HaasSohnError
from .auth import NonceManager
from .const import (
    COMMAND_FIELDS,
    DOMAIN,
    POINT_CONNECTION,
    POINT_ECO_EDITABLE,
    POINT_ECO_MODE,
    POINT_MISSING_STATE,
    POINT_TERMINATED,
)
from .store import PointState, StatePointStore, StateStoreError
from .sync import StateSynchronizer

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .points import PointDescription

_LOGGER = logging.getLogger(__name__)


class HaasSohnEntityMixin:
    """Mixin providing common functionality for Haas+Sohn entities."""

    _attr_has_entity_name = True
    _attr_should_poll = False
    coordinator: "HaasSohnCoordinator"  # Set by subclass __init__
    point: "PointDescription"

    def _init_point(
        self, coordinator: "HaasSohnCoordinator", point: "PointDescription"
    ) -> None:
        self.coordinator = coordinator
        self.point = point
        self._attr_name = point.name
        self._attr_unique_id = f"{coordinator.entry_id}_{point.key}"
        if point.device_class is not None:
            self._attr_device_class = point.device_class
        if point.diagnostic:
            self._attr_entity_category = EntityCategory.DIAGNOSTIC

    async def async_added_to_hass(self) -> None:
        """Register callback when entity is added."""
        self.coordinator.register_callback(self.async_write_ha_state)

    async def async_will_remove_from_hass(self) -> None:
        """Unregister callback when entity is removed."""
        self.coordinator.unregister_callback(self.async_write_ha_state)

    @property
    def device_info(self) -> DeviceInfo:
        """Return device info to link entity to device."""
        return self.coordinator.device_info

    @property
    def available(self) -> bool:
        """Return True if the stove answered the last poll."""
        return self.coordinator.state.connected

    @property
    def point_value(self) -> Any:
        """Return the stored value of this entity's point."""
        return self.coordinator.store.get_value(self.point.key)


@dataclass
class StoveState:
    """Health of the connection to one stove.

    Attributes:
        error_count: Consecutive failed polls.
        missing_state: Set once the stove reported a point the store does not
            know. Never cleared.
        terminated: Set on an unsupported hardware/software combination or a
            store failure. Polling stops for good once set.
        hw_version: Hardware version last reported by the stove.
        sw_version: Software version last reported by the stove.
        last_error: Message of the last failed poll.
        last_poll: Wall clock time of the last successful poll.
    """

    error_count: int = 0
    missing_state: bool = False
    terminated: bool = False
    hw_version: Any = None
    sw_version: Any = None
    last_error: str | None = None
    last_poll: float | None = None
    polled: bool = field(default=False, repr=False)

    @property
    def connected(self) -> bool:
        """Return True if the last poll succeeded and we are still running."""
        return self.polled and self.error_count == 0 and not self.terminated


class HaasSohnCoordinator:
    """Coordinator for one Haas+Sohn stove.

    Polling:
        One poll cycle fetches the status document, mirrors it into the
        state point store and publishes the health points. Cycles run every
        ``scan_interval`` seconds and right after each command. At most one
        cycle is in flight; concurrent callers await the running one.

    Authentication:
        Commands need HSPIN, derived from the nonce in the status document.
        A stale nonce is refreshed by the client through ``async_poll``
        before the command is sent.

    Commands:
        Entities write to the store with ``ack=False``. The store notifies
        the coordinator, which POSTs the matching field and acknowledges the
        point once the stove answered with HTTP 200.

    Termination:
        An unsupported hardware/software combination or a broken store sets
        ``state.terminated``. Nothing transitions out of it; reload the
        config entry after fixing the cause.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        session: aiohttp.ClientSession,
        host: str,
        pin: str,
        scan_interval: int,
        supported_versions: dict[str, bool],
        store: StatePointStore,
        entry_id: str,
    ) -> None:
        """Initialize the coordinator."""
        self._hass = hass
        self._host = host
        self._scan_interval = scan_interval
        self._supported_versions = supported_versions
        self._entry_id = entry_id

        self._running: bool = False
        self._callbacks: set[Callable[[], None]] = set()
        self._poll_task: asyncio.Task[None] | None = None
        self._scheduled_poll: asyncio.TimerHandle | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._command_tasks: set[asyncio.Task[None]] = set()

        self.state = StoveState()
        self.store = store
        self.nonce = NonceManager(pin, refresh=self._async_refresh_nonce)
        self.client = HaasSohnClient(session, host, self.nonce)
        self.synchronizer = StateSynchronizer(store, self.nonce, self.state)

        _LOGGER.debug(
            "Coordinator initialized for %s (scan_interval=%ds)", host, scan_interval
        )

    @property
    def device_info(self) -> DeviceInfo:
        """Return device info for entity registry."""
        return DeviceInfo(
            identifiers={(DOMAIN, self._entry_id)},
            name="Haas+Sohn Stove",
            manufacturer="Haas+Sohn",
            model=self.store.get_value("device.meta.typ") or "Pellet stove",
            sw_version=self.state.sw_version,
            hw_version=self.state.hw_version,
        )

    @property
    def entry_id(self) -> str:
        """Return the config entry ID."""
        return self._entry_id

    @property
    def scan_interval(self) -> int:
        """Return the polling interval in seconds."""
        return self._scan_interval

    def register_callback(self, callback: Callable[[], None]) -> None:
        """Register callback to be called on state updates."""
        self._callbacks.add(callback)

    def unregister_callback(self, callback: Callable[[], None]) -> None:
        """Unregister a callback."""
        self._callbacks.discard(callback)

    def _notify_state_update(self) -> None:
        """Notify all registered callbacks of state change."""
        # Iterate over a copy in case a callback modifies the set
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception:
                _LOGGER.exception("Exception in state update callback")

    def update_scan_interval(self, scan_interval: int) -> None:
        """Update the scan interval, effective from the next cycle."""
        self._scan_interval = scan_interval

    def update_supported_versions(self, supported_versions: dict[str, bool]) -> None:
        """Replace the hardware/software allow-list."""
        self._supported_versions = supported_versions

    async def async_start(self) -> None:
        """Subscribe to commands and run the first poll."""
        _LOGGER.debug("Starting coordinator for %s", self._host)
        self._running = True
        self._unsubscribe = self.store.subscribe(self._handle_store_update)
        await self.async_poll()

    async def async_stop(self) -> None:
        """Stop polling and drop pending work."""
        self._running = False
        self._cancel_scheduled_poll()

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        tasks = [*self._command_tasks]
        if self._poll_task is not None:
            tasks.append(self._poll_task)
        for task in tasks:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._poll_task = None
        self._command_tasks.clear()

        # Clear callbacks to prevent memory leaks
        self._callbacks.clear()

        _LOGGER.debug("Coordinator stopped cleanly")

    def _cancel_scheduled_poll(self) -> None:
        if self._scheduled_poll:
            self._scheduled_poll.cancel()
            self._scheduled_poll = None

    def _schedule_next_poll(self) -> None:
        self._scheduled_poll = self._hass.loop.call_later(
            self._scan_interval, lambda: asyncio.create_task(self.async_poll())
        )

    async def async_poll(self) -> None:
        """Run one poll cycle, or wait for the one already running."""
        if self.state.terminated:
            _LOGGER.debug("Integration is terminated, not polling")
            return
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._async_poll_cycle())
        await asyncio.shield(self._poll_task)

    async def _async_poll_cycle(self) -> None:
        """Fetch, sync and publish health."""
        _LOGGER.debug("Polling device started")
        self._cancel_scheduled_poll()

        try:
            document = await self.client.async_get_status()
        except HaasSohnError as ex:
            self.state.error_count += 1
            self.state.last_error = str(ex)
            _LOGGER.error("Error retrieving status: %s", ex)
        else:
            self.state.error_count = 0
            self.state.last_error = None
            self.state.polled = True
            self.state.last_poll = time.time()
            self.nonce.update_from_document(document)
            try:
                await self.synchronizer.async_sync(document)
            except Exception:
                _LOGGER.exception("Error syncing states")
                self.state.terminated = True

        self._check_versions()
        await self._async_publish_health()
        self._notify_state_update()

        if self._running and not self.state.terminated:
            self._schedule_next_poll()
        _LOGGER.debug("Polling device ended")

    async def _async_refresh_nonce(self) -> None:
        """Poll for a new nonce before a command is sent.

        The refresh poll may terminate the integration (e.g. an unsupported
        version); the pending command must not go out in that case.
        """
        await self.async_poll()
        if self.state.terminated:
            raise HaasSohnError("Integration terminated, command not sent")

    def _check_versions(self) -> None:
        """Terminate if the stove runs an untested hardware/software combination."""
        hw_version, sw_version = self.state.hw_version, self.state.sw_version
        if hw_version is None or sw_version is None or self.state.terminated:
            return
        combination = f"{hw_version}_{sw_version}"
        if self._supported_versions.get(combination):
            _LOGGER.debug("Hardware / software combination %s is supported", combination)
            return
        _LOGGER.error(
            "Hardware / software combination (%s) is not supported by this "
            "integration! Please open an issue on GitHub",
            combination,
        )
        self.state.terminated = True

    async def _async_publish_health(self) -> None:
        """Write the health points, skipping values that did not change."""
        if self.state.error_count > 0:
            _LOGGER.error(
                "There was an error getting the device status (counter: %d)",
                self.state.error_count,
            )
        health = {
            POINT_CONNECTION: self.state.connected,
            POINT_MISSING_STATE: self.state.missing_state,
            POINT_TERMINATED: self.state.terminated,
        }
        try:
            for point_id, value in health.items():
                current = await self.store.async_get_state(point_id)
                if current is None or current.val != value:
                    await self.store.async_set_state(point_id, value, ack=True)
        except StateStoreError as ex:
            _LOGGER.error("Error publishing %s: %s", point_id, ex)
            self.state.terminated = True

        if self.state.terminated:
            _LOGGER.error("Some critical error occurred (see log). Disabling the integration")

    def _handle_store_update(self, point_id: str, state: PointState) -> None:
        """Forward unacknowledged writes to the command dispatcher."""
        if state.ack:
            return
        if not self._running:
            _LOGGER.warning(
                "Coordinator is not running, dropping command %s=%s",
                point_id,
                state.val,
            )
            return
        task = asyncio.create_task(self.async_handle_state_change(point_id, state))
        self._command_tasks.add(task)
        task.add_done_callback(self._command_tasks.discard)

    async def async_handle_state_change(self, point_id: str, state: PointState) -> None:
        """Send a command written to the store and re-poll."""
        if state.ack:
            return
        _LOGGER.debug("State change (command): %s %s", point_id, state.val)

        field_name = COMMAND_FIELDS.get(point_id)
        if field_name is None:
            _LOGGER.warning("Unhandled state change for %s", point_id)
            return

        if self.state.terminated:
            _LOGGER.warning(
                "Integration is terminated, ignoring command %s=%s", point_id, state.val
            )
            return

        if point_id == POINT_ECO_MODE:
            try:
                editable = await self.store.async_get_state(POINT_ECO_EDITABLE)
            except StateStoreError as ex:
                _LOGGER.error("Error getting eco_editable state: %s", ex)
                return
            if editable is None or not editable.val:
                _LOGGER.warning(
                    "Eco mode is not editable. Ignoring command to change eco mode"
                )
                return

        await self._async_send_command(point_id, {field_name: state.val}, state.val)

        # Poll new state to pick up the result and the next nonce
        await self.async_poll()

    async def _async_send_command(
        self, point_id: str, fields: dict[str, Any], value: Any
    ) -> None:
        try:
            status = await self.client.async_send_command(fields)
        except HaasSohnError as ex:
            _LOGGER.error("Error executing command %s: %s", fields, ex)
            return

        if status != 200:
            _LOGGER.error("Command %s was not successful (HTTP %s)", fields, status)
            return

        try:
            await self.store.async_set_state(point_id, value, ack=True)
        except StateStoreError as ex:
            _LOGGER.error("Error acknowledging %s: %s", point_id, ex)
            return
        self._notify_state_update()
