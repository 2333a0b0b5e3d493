"""Diagnostics support for Haas+Sohn integration."""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant

from .const import (
    CONF_PIN,
    CONF_SCAN_INTERVAL,
    CONF_SUPPORTED_VERSIONS,
    DOMAIN,
    POINT_NONCE,
)
from .coordinator import HaasSohnCoordinator

TO_REDACT = {CONF_PIN, POINT_NONCE, "device.meta.sn", "device.meta.ean"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for the config entry."""
    coordinator: HaasSohnCoordinator = hass.data[DOMAIN][entry.entry_id]
    store = coordinator.store

    return async_redact_data(
        {
            "config": {
                "host": entry.data.get(CONF_HOST),
                "pin": entry.data.get(CONF_PIN),
                "scan_interval": entry.options.get(CONF_SCAN_INTERVAL),
                "supported_versions": entry.options.get(CONF_SUPPORTED_VERSIONS),
            },
            "state": {
                "connected": coordinator.state.connected,
                "error_count": coordinator.state.error_count,
                "missing_state": coordinator.state.missing_state,
                "terminated": coordinator.state.terminated,
                "hw_version": coordinator.state.hw_version,
                "sw_version": coordinator.state.sw_version,
                "last_error": coordinator.state.last_error,
                "last_poll": coordinator.state.last_poll,
            },
            "nonce": {
                "stale": coordinator.nonce.is_stale,
                "has_session_secret": coordinator.nonce.hspin is not None,
            },
            "points": {
                point_id: store.get_value(point_id) for point_id in store.point_ids
            },
        },
        TO_REDACT,
    )
