"""Tests for Haas+Sohn config flow."""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import patch

import pytest
from homeassistant import config_entries
from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.haassohn.api import HaasSohnConnectionError
from custom_components.haassohn.const import (
    CONF_PIN,
    CONF_SCAN_INTERVAL,
    CONF_SUPPORTED_VERSIONS,
    DOMAIN,
)

from .conftest import status_document

FETCH_STATUS = (
    "custom_components.haassohn.config_flow.HaasSohnConfigFlow._fetch_status"
)
USER_INPUT = {CONF_HOST: "192.168.1.100", CONF_PIN: "1234"}


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: None) -> None:
    """Load custom_components/haassohn."""


@pytest.fixture(autouse=True)
def mock_setup_entry() -> Generator[None, None, None]:
    """Do not start polling when an entry gets created."""
    with patch("custom_components.haassohn.async_setup_entry", return_value=True):
        yield


async def test_form_success(hass: HomeAssistant) -> None:
    """Test successful config flow."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result["type"] == FlowResultType.FORM
    assert result["errors"] == {}

    with patch(FETCH_STATUS, return_value=status_document()):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )
        await hass.async_block_till_done()

    assert result["type"] == FlowResultType.CREATE_ENTRY
    assert result["title"] == "Haas+Sohn (192.168.1.100)"
    assert result["data"] == USER_INPUT
    assert result["result"].unique_id == "12345"


async def test_form_connection_error(hass: HomeAssistant) -> None:
    """Test config flow with connection error."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    with patch(FETCH_STATUS, side_effect=HaasSohnConnectionError("timeout")):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )

    assert result["type"] == FlowResultType.FORM
    assert result["errors"]["base"] == "cannot_connect"


async def test_form_invalid_response(hass: HomeAssistant) -> None:
    """A device without nonce is not a Haas+Sohn stove."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    with patch(FETCH_STATUS, return_value={"status": "ok"}):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )

    assert result["type"] == FlowResultType.FORM
    assert result["errors"]["base"] == "invalid_response"


async def test_form_duplicate_stove(hass: HomeAssistant) -> None:
    """Test config flow aborts on a stove that is already configured."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    with patch(FETCH_STATUS, return_value=status_document()):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )
        await hass.async_block_till_done()

    assert result["type"] == FlowResultType.CREATE_ENTRY

    # Same serial number behind a new address
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    with patch(FETCH_STATUS, return_value=status_document()):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], {CONF_HOST: "192.168.1.101", CONF_PIN: "1234"}
        )

    assert result["type"] == FlowResultType.ABORT
    assert result["reason"] == "already_configured"


async def test_options_flow(hass: HomeAssistant) -> None:
    """Test the options flow stores interval and extra versions."""
    entry = MockConfigEntry(domain=DOMAIN, data=USER_INPUT, unique_id="12345")
    entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(entry.entry_id)
    assert result["type"] == FlowResultType.FORM
    assert result["step_id"] == "init"

    result = await hass.config_entries.options.async_configure(
        result["flow_id"],
        {CONF_SCAN_INTERVAL: 60, CONF_SUPPORTED_VERSIONS: "7.0_1.5.5"},
    )

    assert result["type"] == FlowResultType.CREATE_ENTRY
    assert entry.options == {
        CONF_SCAN_INTERVAL: 60,
        CONF_SUPPORTED_VERSIONS: "7.0_1.5.5",
    }
