"""Sensor platform for Haas+Sohn integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
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
    """Set up Haas+Sohn sensor entities."""
    coordinator: HaasSohnCoordinator = hass.data[DOMAIN][entry.entry_id]
    _LOGGER.debug("Setting up sensor entities for %s", entry.entry_id)
    async_add_entities(
        HaasSohnSensor(coordinator, point)
        for point in points_for_platform(Platform.SENSOR)
    )


class HaasSohnSensor(HaasSohnEntityMixin, SensorEntity):
    """Sensor mirroring one telemetry or meta data point."""

    def __init__(self, coordinator: HaasSohnCoordinator, point: PointDescription) -> None:
        """Initialize the sensor."""
        self._init_point(coordinator, point)
        self._attr_native_unit_of_measurement = point.unit
        if point.type == "number" and not point.diagnostic:
            self._attr_state_class = SensorStateClass.MEASUREMENT

    @property
    def native_value(self) -> Any:
        """Return the stored value."""
        return self.point_value
