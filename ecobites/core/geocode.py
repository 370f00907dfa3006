# ecobites/core/geocode.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from ecobites.core.config import settings

logger = logging.getLogger(__name__)


class GeocodeError(Exception):
    pass


def address_query(address: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Free-text query for a postal address, or None when the address is too
    thin to geocode (city, state and country are all needed).
    """
    if not address:
        return None
    city = (address.get("city") or "").strip()
    state = (address.get("state") or "").strip()
    country = (address.get("country") or "").strip()
    if not (city and state and country):
        return None
    street = (address.get("street") or "").strip()
    prefix = f"{street} " if street else ""
    return f"{prefix}{city}, {state}, {country}"


class Geocoder:
    """Forward/reverse geocoding against a Nominatim-compatible service."""

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.geocoder_url).rstrip("/")
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=settings.geocode_timeout,
                headers={"User-Agent": settings.geocoder_user_agent},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        try:
            r = await self.client.get(f"{self.base_url}{path}", params=params)
            r.raise_for_status()
            return r.json()
        except (httpx.HTTPError, ValueError) as ex:
            raise GeocodeError(f"Geocoder request failed: {ex}") from ex

    async def search(self, query: str) -> Tuple[float, float]:
        """
        Returns (lat, lng). Raises GeocodeError on failure.
        """
        q = (query or "").strip()
        if not q:
            raise GeocodeError("Empty address")
        js = await self._get("/search", {"q": q, "format": "json", "limit": 1})
        if not isinstance(js, list) or not js:
            raise GeocodeError(f"No results for {q!r}")
        try:
            return float(js[0]["lat"]), float(js[0]["lon"])
        except (KeyError, IndexError, TypeError, ValueError) as ex:
            raise GeocodeError(f"Malformed geocoder result for {q!r}: {ex!r}") from ex

    async def reverse(self, lat: float, lng: float) -> Dict[str, Any]:
        js = await self._get(
            "/reverse",
            {"format": "jsonv2", "lat": lat, "lon": lng, "zoom": 18, "addressdetails": 1},
        )
        if not isinstance(js, dict) or not isinstance(js.get("address"), dict):
            raise GeocodeError(f"No address found for {lat},{lng}")
        addr = js["address"]
        return {
            "street": addr.get("road") or addr.get("neighbourhood"),
            "city": addr.get("city") or addr.get("town") or addr.get("village"),
            "state": addr.get("state"),
            "postal_code": addr.get("postcode"),
            "country": addr.get("country"),
            "display_name": js.get("display_name"),
        }

    async def locate(self, address: Optional[Dict[str, Any]]) -> Optional[Tuple[float, float]]:
        """Best-effort forward geocode of a postal address; None on any miss."""
        q = address_query(address)
        if q is None:
            return None
        try:
            return await self.search(q)
        except GeocodeError as ex:
            logger.warning("Geocode miss: %s", ex)
            return None
