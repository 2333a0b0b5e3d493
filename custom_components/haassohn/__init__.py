"""Haas+Sohn pellet stove integration for Home Assistant."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.storage import Store

from .const import (
    CONF_PIN,
    CONF_SCAN_INTERVAL,
    CONF_SUPPORTED_VERSIONS,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_SUPPORTED_VERSIONS,
    DOMAIN,
    STORAGE_VERSION,
)
from .coordinator import HaasSohnCoordinator
from .points import build_point_objects
from .store import StatePointStore

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.BINARY_SENSOR,
    Platform.NUMBER,
    Platform.SENSOR,
    Platform.SWITCH,
]


def supported_versions(entry: ConfigEntry) -> dict[str, bool]:
    """Return the built-in allow-list merged with the configured extras."""
    versions = dict(DEFAULT_SUPPORTED_VERSIONS)
    extra = entry.options.get(CONF_SUPPORTED_VERSIONS, "")
    for combination in extra.split(","):
        combination = combination.strip()
        if combination:
            versions[combination] = True
    return versions


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a Haas+Sohn stove from a config entry."""
    host = entry.data[CONF_HOST]
    scan_interval = entry.options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL)

    _LOGGER.debug(
        "Setting up Haas+Sohn integration for %s (scan_interval=%ds)",
        host,
        scan_interval,
    )

    store = StatePointStore(
        build_point_objects(),
        Store(hass, STORAGE_VERSION, f"{DOMAIN}.{entry.entry_id}"),
    )
    await store.async_load()

    coordinator = HaasSohnCoordinator(
        hass,
        async_get_clientsession(hass),
        host,
        entry.data[CONF_PIN],
        scan_interval,
        supported_versions(entry),
        store,
        entry.entry_id,
    )

    # Subscribe and run the first poll before entities can write commands;
    # poll failures are retried on the next cycle
    await coordinator.async_start()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Register options update listener
    entry.async_on_unload(entry.add_update_listener(async_options_updated))

    _LOGGER.info("Haas+Sohn integration setup complete for %s", host)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    _LOGGER.debug("Unloading Haas+Sohn integration for %s", entry.data[CONF_HOST])

    # Unload platforms FIRST (entities may still be using coordinator)
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        coordinator: HaasSohnCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        await coordinator.async_stop()
        await coordinator.store.async_close()
        _LOGGER.info("Haas+Sohn integration unloaded for %s", entry.data[CONF_HOST])
    else:
        _LOGGER.warning(
            "Failed to unload platforms for Haas+Sohn %s", entry.data[CONF_HOST]
        )
    return unload_ok


async def async_options_updated(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options update (scan interval, supported versions)."""
    new_interval = entry.options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL)
    _LOGGER.info(
        "Haas+Sohn options updated: scan_interval=%ds for %s",
        new_interval,
        entry.data[CONF_HOST],
    )
    coordinator: HaasSohnCoordinator = hass.data[DOMAIN][entry.entry_id]
    coordinator.update_scan_interval(new_interval)
    coordinator.update_supported_versions(supported_versions(entry))
