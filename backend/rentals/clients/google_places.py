# backend/rentals/clients/google_places.py
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..config import settings

log = logging.getLogger(__name__)


class PlacesError(RuntimeError):
    pass


class GooglePlacesClient:
    """Server-side proxy for the Places web service so the key never reaches the browser."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None) -> None:
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base = (base_url or settings.google_places_base_url).rstrip("/")

    def enabled(self) -> bool:
        return bool(self.api_key)

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base}/{endpoint}/json"
        try:
            with httpx.Client(timeout=settings.http_timeout) as client:
                r = client.get(url, params={**params, "key": self.api_key})
                r.raise_for_status()
                return r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("places request failed: %s", endpoint, exc_info=True)
            raise PlacesError(str(e)) from e

    def autocomplete(self, *, input: str, country: str = "es", language: str = "es") -> dict[str, Any]:
        return self._get(
            "autocomplete",
            {
                "input": input,
                "language": language,
                "components": f"country:{country}",
                "types": "address",
            },
        )

    def details(self, *, place_id: str, language: str = "es") -> dict[str, Any]:
        return self._get(
            "details",
            {
                "place_id": place_id,
                "language": language,
                "fields": "address_component,formatted_address,geometry",
            },
        )


def get_places_client() -> GooglePlacesClient:
    return GooglePlacesClient()
