"""Pytest fixtures for Haas+Sohn tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from custom_components.haassohn.coordinator import HaasSohnCoordinator
from custom_components.haassohn.points import build_point_objects
from custom_components.haassohn.store import PointObject, StatePointStore


class MockResponse:
    """Minimal aiohttp response usable as an async context manager."""

    def __init__(self, status: int, json_data: Any = None, text: str = "") -> None:
        self.status = status
        self._json = json_data
        self._text = text

    async def __aenter__(self) -> MockResponse:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def json(self, content_type: str | None = "application/json") -> Any:
        if isinstance(self._json, Exception):
            raise self._json
        return self._json

    async def text(self) -> str:
        return self._text


def status_document(**overrides: Any) -> dict[str, Any]:
    """Return a status document as the stove reports it."""
    document: dict[str, Any] = {
        "meta": {
            "sw_version": "1.4.1",
            "hw_version": "5.0",
            "sn": "12345",
            "typ": "HSP 2.17",
            "nonce": "abc",
            "eco_editable": True,
        },
        "prg": True,
        "mode": "heating",
        "sp_temp": 21.5,
        "is_temp": 20.0,
        "eco_mode": False,
        "weekprogram": [1, 2],
    }
    document.update(overrides)
    return document


@pytest.fixture
def mock_hass() -> MagicMock:
    """Return a mock Home Assistant instance."""
    hass = MagicMock()
    hass.loop = MagicMock()
    return hass


@pytest.fixture
def mock_session() -> MagicMock:
    """Return a mock aiohttp session."""
    return MagicMock()


@pytest.fixture
def store() -> StatePointStore:
    """Return a store with every known point plus a test-only point."""
    objects = build_point_objects()
    objects["device.device.temp"] = PointObject(name="Temp", type="number")
    return StatePointStore(objects)


@pytest.fixture
def coordinator(
    mock_hass: MagicMock, mock_session: MagicMock, store: StatePointStore
) -> HaasSohnCoordinator:
    """Return a HaasSohnCoordinator instance for testing."""
    return HaasSohnCoordinator(
        hass=mock_hass,
        session=mock_session,
        host="192.168.1.100",
        pin="1234",
        scan_interval=30,
        supported_versions={"5.0_1.4.1": True, "1_2": True},
        store=store,
        entry_id="test_entry_id",
    )
