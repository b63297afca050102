"""Google Places nearby-search client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from nightswipe.domain.errors import UpstreamRateLimited, UpstreamUnavailable

DEFAULT_PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"

_RATE_LIMIT_STATUSES = {"OVER_QUERY_LIMIT"}

_logger = logging.getLogger(__name__)


class PlacesClient(Protocol):
    """Interface for venue lookups around a location."""

    async def search_nearby(
        self, lat: float, lng: float, radius_m: int, type_filter: str
    ) -> list[dict[str, object]]:
        """Return raw venue records within ``radius_m`` of the location."""


@dataclass
class HttpxPlacesClient(PlacesClient):
    """HTTPX-backed Places client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, api_key: str, base_url: str = DEFAULT_PLACES_BASE_URL
    ) -> "HttpxPlacesClient":
        """Create a Places client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def search_nearby(
        self, lat: float, lng: float, radius_m: int, type_filter: str
    ) -> list[dict[str, object]]:
        """Search venues with the Nearby Search endpoint."""
        if not self.api_key:
            raise UpstreamUnavailable("Places API key is not configured")
        url = f"{self.base_url}/nearbysearch/json"
        try:
            response = await self.http_client.get(
                url,
                params={
                    "location": f"{lat},{lng}",
                    "radius": radius_m,
                    "type": type_filter,
                    "key": self.api_key,
                },
                timeout=15,
            )
        except httpx.HTTPError as exc:
            _logger.warning("Places request failed: %s", exc)
            raise UpstreamUnavailable("Venue lookup is unavailable") from exc

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise UpstreamRateLimited("Places API quota exceeded")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailable(
                f"Places API returned HTTP {response.status_code}"
            ) from exc

        payload = response.json()
        status = payload.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status in _RATE_LIMIT_STATUSES:
            raise UpstreamRateLimited("Places API quota exceeded")
        if status != "OK":
            _logger.warning(
                "Places API error status=%s message=%s",
                status,
                payload.get("error_message"),
            )
            raise UpstreamUnavailable(f"Places API error: {status}")
        return list(payload.get("results") or [])

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
