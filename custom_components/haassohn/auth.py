"""PIN derivation and nonce tracking for Haas+Sohn stoves.

The stove authenticates writes with a value derived from its PIN and the
nonce it publishes in every status document:

    HPIN  = MD5(PIN)
    HSPIN = MD5(NONCE + HPIN)

The firmware performs the same computation, so the hash function is fixed.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from .const import NONCE_EXPIRY

_LOGGER = logging.getLogger(__name__)


def derive_hash(secret: Any) -> str:
    """Return the hex MD5 digest of the string form of secret."""
    return hashlib.md5(str(secret).encode()).hexdigest()


def derive_session_secret(nonce: Any, hpin: str) -> str:
    """Return HSPIN for the given nonce and derived PIN hash."""
    return derive_hash(f"{nonce}{hpin}")


class NonceManager:
    """Track the device nonce and the session secret derived from it.

    The only way to obtain a new nonce is to poll the status document, so
    a stale nonce is refreshed by awaiting the ``refresh`` callback (the
    coordinator's poll). That poll is unauthenticated and never calls back
    into this class' refresh path.
    """

    def __init__(
        self,
        pin: str,
        refresh: Callable[[], Awaitable[None]] | None = None,
        expiry: float = NONCE_EXPIRY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the nonce manager."""
        self.hpin = derive_hash(pin)
        self.nonce: Any = None
        self.hspin: str | None = None
        self.updated_at: float = 0.0
        self.refresh = refresh
        self._expiry = expiry
        self._clock = clock

    @property
    def is_stale(self) -> bool:
        """Return True if the nonce is unset or older than the expiry window."""
        if not self.nonce:
            return True
        return self._clock() - self.updated_at > self._expiry

    def update(self, nonce: Any) -> bool:
        """Store a nonce reported by the device.

        Returns True if the nonce changed, in which case the timestamp is
        reset and HSPIN recomputed.
        """
        if nonce == self.nonce:
            _LOGGER.debug("Nonce remains unchanged: %s", nonce)
            return False
        _LOGGER.debug("Nonce changed: %s → %s", self.nonce, nonce)
        self.nonce = nonce
        self.updated_at = self._clock()
        self.hspin = derive_session_secret(nonce, self.hpin)
        return True

    def update_from_document(self, document: dict[str, Any]) -> bool:
        """Pick the nonce out of a raw status document."""
        meta = document.get("meta")
        if isinstance(meta, dict) and meta.get("nonce"):
            return self.update(meta["nonce"])
        _LOGGER.warning("Nonce not found in the status document")
        return False

    async def async_ensure_fresh(self) -> None:
        """Refresh the nonce by polling the device if it is stale."""
        if not self.is_stale:
            _LOGGER.debug("Nonce is valid, proceeding with request")
            return
        if self.refresh is None:
            _LOGGER.debug("Nonce is stale and no refresh callback is set")
            return
        _LOGGER.debug("Nonce is missing or expired, polling device to refresh it")
        await self.refresh()
