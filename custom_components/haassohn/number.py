"""Number platform for Haas+Sohn integration."""

from __future__ import annotations

import logging

from homeassistant.components.number import NumberEntity, NumberMode
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import HaasSohnCoordinator, HaasSohnEntityMixin
from .points import PointDescription, points_for_platform

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Haas+Sohn number entities."""
    coordinator: HaasSohnCoordinator = hass.data[DOMAIN][entry.entry_id]
    _LOGGER.debug("Setting up number entities for %s", entry.entry_id)
    async_add_entities(
        HaasSohnTargetTemperature(coordinator, point)
        for point in points_for_platform(Platform.NUMBER)
    )


class HaasSohnTargetTemperature(HaasSohnEntityMixin, NumberEntity):
    """Target temperature of the stove (0.5 °C steps)."""

    _attr_mode = NumberMode.BOX
    _attr_native_min_value = 10.0
    _attr_native_max_value = 30.0
    _attr_native_step = 0.5

    def __init__(self, coordinator: HaasSohnCoordinator, point: PointDescription) -> None:
        """Initialize the number."""
        self._init_point(coordinator, point)
        self._attr_native_unit_of_measurement = point.unit

    @property
    def native_value(self) -> float | None:
        """Return the target temperature."""
        return self.point_value

    async def async_set_native_value(self, value: float) -> None:
        """Request a new target temperature."""
        _LOGGER.debug("%s set_native_value=%s", self.point.key, value)
        await self.coordinator.store.async_set_state(self.point.key, value)
