"""Binary sensor platform for Haas+Sohn integration."""

from __future__ import annotations

import logging

from homeassistant.components.binary_sensor import BinarySensorEntity
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
    """Set up Haas+Sohn binary sensor entities."""
    coordinator: HaasSohnCoordinator = hass.data[DOMAIN][entry.entry_id]
    _LOGGER.debug("Setting up binary sensor entities for %s", entry.entry_id)
    async_add_entities(
        HaasSohnBinarySensor(coordinator, point)
        for point in points_for_platform(Platform.BINARY_SENSOR)
    )


class HaasSohnBinarySensor(HaasSohnEntityMixin, BinarySensorEntity):
    """Binary sensor for a boolean point, including the health points."""

    def __init__(self, coordinator: HaasSohnCoordinator, point: PointDescription) -> None:
        """Initialize the binary sensor."""
        self._init_point(coordinator, point)

    @property
    def available(self) -> bool:
        """Health points stay available while the stove is unreachable."""
        if self.point.key.startswith("info."):
            return True
        return super().available

    @property
    def is_on(self) -> bool | None:
        """Return the stored value."""
        value = self.point_value
        return None if value is None else bool(value)
