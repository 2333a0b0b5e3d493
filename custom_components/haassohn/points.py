"""State points known to the Haas+Sohn integration.

Every leaf of the stove's status document maps to ``device.<path>``. Only the
points listed here exist in the store; anything else the stove reports is
flagged as a missing state.
"""

from __future__ import annotations

from dataclasses import dataclass

from homeassistant.const import Platform, UnitOfMass, UnitOfTemperature, UnitOfTime

from .const import (
    POINT_CONNECTION,
    POINT_ECO_EDITABLE,
    POINT_ECO_MODE,
    POINT_HW_VERSION,
    POINT_MISSING_STATE,
    POINT_NONCE,
    POINT_PROGRAM,
    POINT_SW_VERSION,
    POINT_TARGET_TEMP,
    POINT_TERMINATED,
)
from .store import PointObject


@dataclass(frozen=True)
class PointDescription:
    """Static description of a state point and the entity exposing it.

    ``platform`` is None for points kept in the store only (nonce, arrays).
    """

    key: str
    name: str
    type: str
    platform: Platform | None = None
    unit: str | None = None
    device_class: str | None = None
    write: bool = False
    diagnostic: bool = False


POINTS: tuple[PointDescription, ...] = (
    # Device meta data
    PointDescription(POINT_SW_VERSION, "Software version", "string", Platform.SENSOR, diagnostic=True),
    PointDescription(POINT_HW_VERSION, "Hardware version", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.bootl_version", "Bootloader version", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.wifi_sw_version", "WiFi software version", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.wifi_bootl_version", "WiFi bootloader version", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.sn", "Serial number", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.typ", "Stove type", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.language", "Language", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.ean", "EAN", "string", Platform.SENSOR, diagnostic=True),
    PointDescription("device.meta.rau", "Room air independent", "boolean", Platform.BINARY_SENSOR, diagnostic=True),
    PointDescription("device.meta.wlan_features", "WLAN features", "string"),
    PointDescription("device.meta.ts", "Device timestamp", "number"),
    PointDescription(POINT_NONCE, "Nonce", "string"),
    PointDescription(POINT_ECO_EDITABLE, "Eco mode editable", "boolean", Platform.BINARY_SENSOR, diagnostic=True),
    # Commands
    PointDescription(POINT_PROGRAM, "Program", "boolean", Platform.SWITCH, write=True),
    PointDescription(
        POINT_TARGET_TEMP,
        "Target temperature",
        "number",
        Platform.NUMBER,
        unit=UnitOfTemperature.CELSIUS,
        device_class="temperature",
        write=True,
    ),
    # Writability follows device.meta.eco_editable
    PointDescription(POINT_ECO_MODE, "Eco mode", "boolean", Platform.SWITCH),
    # Telemetry
    PointDescription("device.wprg", "Week program", "boolean", Platform.BINARY_SENSOR),
    PointDescription("device.mode", "Mode", "string", Platform.SENSOR),
    PointDescription(
        "device.is_temp",
        "Temperature",
        "number",
        Platform.SENSOR,
        unit=UnitOfTemperature.CELSIUS,
        device_class="temperature",
    ),
    PointDescription("device.ht_char", "Heating characteristic", "number", Platform.SENSOR),
    PointDescription("device.weekprogram", "Week program schedule", "string"),
    PointDescription("device.err", "Error code", "number", Platform.SENSOR, diagnostic=True),
    PointDescription("device.pgi", "Pellet ignition", "boolean", Platform.BINARY_SENSOR),
    PointDescription("device.ignitions", "Ignitions", "number", Platform.SENSOR),
    PointDescription(
        "device.on_time",
        "Operating time",
        "number",
        Platform.SENSOR,
        unit=UnitOfTime.HOURS,
        device_class="duration",
    ),
    PointDescription(
        "device.consumption",
        "Pellet consumption",
        "number",
        Platform.SENSOR,
        unit=UnitOfMass.KILOGRAMS,
        device_class="weight",
    ),
    PointDescription(
        "device.maintenance_in",
        "Maintenance in",
        "number",
        Platform.SENSOR,
        unit=UnitOfMass.KILOGRAMS,
        device_class="weight",
    ),
    PointDescription(
        "device.cleaning_in",
        "Cleaning in",
        "number",
        Platform.SENSOR,
        unit=UnitOfTime.HOURS,
        device_class="duration",
    ),
    # Health indicators
    PointDescription(POINT_CONNECTION, "Connected", "boolean", Platform.BINARY_SENSOR, device_class="connectivity", diagnostic=True),
    PointDescription(POINT_MISSING_STATE, "Missing state", "boolean", Platform.BINARY_SENSOR, device_class="problem", diagnostic=True),
    PointDescription(POINT_TERMINATED, "Terminated", "boolean", Platform.BINARY_SENSOR, device_class="problem", diagnostic=True),
)

POINTS_BY_KEY: dict[str, PointDescription] = {point.key: point for point in POINTS}


def build_point_objects() -> dict[str, PointObject]:
    """Return fresh store metadata for every known point."""
    return {
        point.key: PointObject(
            name=point.name, type=point.type, unit=point.unit, write=point.write
        )
        for point in POINTS
    }


def points_for_platform(platform: Platform) -> list[PointDescription]:
    """Return the points exposed through the given entity platform."""
    return [point for point in POINTS if point.platform == platform]
