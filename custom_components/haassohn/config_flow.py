"""Config flow for Haas+Sohn pellet stove integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_HOST
from homeassistant.core import callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import HaasSohnClient, HaasSohnConnectionError
from .auth import NonceManager
from .const import (
    CONF_PIN,
    CONF_SCAN_INTERVAL,
    CONF_SUPPORTED_VERSIONS,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)


class HaasSohnConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle config flow for Haas+Sohn."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle user input."""
        errors: dict[str, str] = {}

        if user_input is not None:
            host = user_input[CONF_HOST]
            _LOGGER.debug("Testing connection to stove at %s", host)

            # Validate connection before accepting
            try:
                document = await self._fetch_status(host, user_input[CONF_PIN])
            except HaasSohnConnectionError as ex:
                _LOGGER.warning("Connection test failed for %s: %s", host, ex)
                errors["base"] = "cannot_connect"
            else:
                meta = document.get("meta")
                if not isinstance(meta, dict) or "nonce" not in meta:
                    _LOGGER.warning("Unexpected status document from %s", host)
                    errors["base"] = "invalid_response"
                else:
                    _LOGGER.info("Connection test successful for %s", host)
                    # Serial number identifies the stove across IP changes
                    await self.async_set_unique_id(str(meta.get("sn") or host))
                    self._abort_if_unique_id_configured()

                    return self.async_create_entry(
                        title=f"Haas+Sohn ({host})",
                        data=user_input,
                    )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_HOST): str,
                    vol.Required(CONF_PIN): str,
                }
            ),
            errors=errors,
        )

    async def _fetch_status(self, host: str, pin: str) -> dict[str, Any]:
        """Fetch the status document once (5s timeout)."""
        client = HaasSohnClient(
            async_get_clientsession(self.hass), host, NonceManager(pin)
        )
        return await client.async_get_status()

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Get the options flow for this handler."""
        return HaasSohnOptionsFlow()


class HaasSohnOptionsFlow(OptionsFlow):
    """Handle options for Haas+Sohn."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage options."""
        if user_input is not None:
            _LOGGER.debug("Options flow saving: %s", user_input)
            return self.async_create_entry(title="", data=user_input)

        options = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SCAN_INTERVAL,
                        default=options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
                    ): vol.All(vol.Coerce(int), vol.Range(min=5, max=3600)),
                    vol.Optional(
                        CONF_SUPPORTED_VERSIONS,
                        default=options.get(CONF_SUPPORTED_VERSIONS, ""),
                    ): str,
                }
            ),
        )
