"""Switch platform for Haas+Sohn integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.switch import SwitchDeviceClass, SwitchEntity
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
    """Set up Haas+Sohn switch entities."""
    coordinator: HaasSohnCoordinator = hass.data[DOMAIN][entry.entry_id]
    _LOGGER.debug("Setting up switch entities for %s", entry.entry_id)
    async_add_entities(
        HaasSohnSwitch(coordinator, point)
        for point in points_for_platform(Platform.SWITCH)
    )


class HaasSohnSwitch(HaasSohnEntityMixin, SwitchEntity):
    """Switch for a boolean command point (program, eco mode).

    Writes go to the state point store unacknowledged; the coordinator
    sends them to the stove and acknowledges on success.
    """

    _attr_device_class = SwitchDeviceClass.SWITCH

    def __init__(self, coordinator: HaasSohnCoordinator, point: PointDescription) -> None:
        """Initialize the switch."""
        self._init_point(coordinator, point)

    @property
    def is_on(self) -> bool | None:
        """Return True if the point is on."""
        value = self.point_value
        return None if value is None else bool(value)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return whether the stove currently accepts this command."""
        obj = self.coordinator.store.get_object(self.point.key)
        return {"editable": bool(obj and obj.write)}

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn the point on."""
        _LOGGER.debug("%s turn_on", self.point.key)
        await self.coordinator.store.async_set_state(self.point.key, True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the point off."""
        _LOGGER.debug("%s turn_off", self.point.key)
        await self.coordinator.store.async_set_state(self.point.key, False)
