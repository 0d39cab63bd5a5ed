"""
Zippopotam town directory adapter - Implements TownDirectory protocol.

Looks postal codes up on api.zippopotam.us with httpx. Each request is
bounded by a timeout; transport problems surface as TownLookupFailed.
"""

import logging
from urllib.parse import quote

import httpx

from localiz.domain.exceptions import TownLookupFailed

logger = logging.getLogger(__name__)

ZIPPOPOTAM_URL = "https://api.zippopotam.us"


class ZippopotamTownDirectory:
    """Resolves postal codes to town names over HTTP."""

    def __init__(
        self,
        base_url: str = ZIPPOPOTAM_URL,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def lookup(self, country: str, postal_code: str) -> str | None:
        url = f"{self._base_url}/{quote(country, safe='')}/{quote(postal_code, safe='')}"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                r = client.get(url)
        except httpx.TimeoutException as e:
            logger.warning("Postal code lookup timed out: %s", postal_code)
            raise TownLookupFailed() from e
        except httpx.RequestError as e:
            logger.warning("Postal code lookup failed: %s (%s)", postal_code, e)
            raise TownLookupFailed() from e

        if r.status_code != 200:
            return None
        try:
            places = r.json().get("places") or []
        except ValueError:
            logger.warning("Postal code lookup returned invalid JSON for %s", postal_code)
            return None
        if not places:
            return None
        return places[0].get("place name") or None
