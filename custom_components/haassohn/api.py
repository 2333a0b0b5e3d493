"""HTTP client for the Haas+Sohn status endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import aiohttp

from .auth import NonceManager
from .const import (
    APP_TOKEN,
    APP_USER_AGENT,
    BACKEND_URL,
    REQUEST_TIMEOUT,
    STATUS_PATH,
)

_LOGGER = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Connection": "close",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class HaasSohnError(Exception):
    """Base error for stove communication."""


class HaasSohnConnectionError(HaasSohnError):
    """The stove could not be reached or answered with an error."""


class HaasSohnAuthError(HaasSohnError):
    """No session secret is available to authenticate a write."""


def build_post_headers(host: str, body: str, hspin: str) -> dict[str, str]:
    """Return the headers the vendor app sends with a command.

    Must be rebuilt for every request: HSPIN changes with the nonce.
    """
    return {
        "Host": host,
        "Accept": "*/*",
        "Proxy-Connection": "keep-alive",
        "X-BACKEND-IP": BACKEND_URL,
        "Accept-Language": "de-DE;q=1.0, en-DE;q=0.9",
        "Accept-Encoding": "gzip, deflate",
        "token": APP_TOKEN,
        "Content-Type": "application/json",
        "Content-Length": str(len(body.encode())),
        "User-Agent": APP_USER_AGENT,
        "Connection": "keep-alive",
        "X-HS-PIN": hspin,
    }


class HaasSohnClient:
    """Client for the stove's local status.cgi endpoint.

    GET is unauthenticated and returns the status document. POST carries a
    single command field and is authenticated with HSPIN, so the nonce is
    checked for freshness before every POST.
    """

    def __init__(
        self, session: aiohttp.ClientSession, host: str, nonce: NonceManager
    ) -> None:
        """Initialize the client."""
        self._session = session
        self._host = host
        self._nonce = nonce
        self._timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)

    @property
    def host(self) -> str:
        """Return the stove address."""
        return self._host

    @property
    def url(self) -> str:
        """Return the status endpoint URL."""
        return f"http://{self._host}{STATUS_PATH}"

    async def async_get_status(self) -> dict[str, Any]:
        """Fetch the status document."""
        # Unique query parameter prevents caching along the way
        params = {"ts": str(int(time.time() * 1000))}
        try:
            async with self._session.get(
                self.url,
                params=params,
                headers=NO_CACHE_HEADERS,
                timeout=self._timeout,
            ) as resp:
                if resp.status != 200:
                    raise HaasSohnConnectionError(f"HTTP {resp.status}")
                document = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
            raise HaasSohnConnectionError(str(ex) or type(ex).__name__) from ex
        except ValueError as ex:
            raise HaasSohnConnectionError(f"Invalid status document: {ex}") from ex

        if not isinstance(document, dict):
            raise HaasSohnConnectionError("Status document is not an object")
        _LOGGER.debug("Status document: %s", document)
        return document

    async def async_send_command(self, fields: dict[str, Any]) -> int:
        """POST a command to the stove and return the HTTP status."""
        await self._nonce.async_ensure_fresh()
        if self._nonce.hspin is None:
            raise HaasSohnAuthError("No nonce received from the stove yet")

        body = json.dumps(fields, separators=(",", ":"))
        headers = build_post_headers(self._host, body, self._nonce.hspin)
        try:
            async with self._session.post(
                self.url, data=body, headers=headers, timeout=self._timeout
            ) as resp:
                text = await resp.text()
                _LOGGER.debug("POST %s: %s [STATUS]; %s [BODY]", body, resp.status, text)
                return resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
            raise HaasSohnConnectionError(str(ex) or type(ex).__name__) from ex
