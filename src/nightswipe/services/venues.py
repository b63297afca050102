"""Mapping of raw venue-provider records into deck places."""

import logging
from dataclasses import dataclass

from nightswipe.domain.deck import Place
from nightswipe.domain.sessions import GeoPoint
from nightswipe.services.geo import haversine_km, round_km

PLACEHOLDER_PHOTO_URL = "https://via.placeholder.com/400x300?text=No+Image"
DEFAULT_PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"
MISSING_ADDRESS = "Address not available"

_logger = logging.getLogger(__name__)


def infer_category(types: list[str] | None) -> str:
    """Pick a display category from provider type tags by priority."""
    tags = set(types or [])
    if "restaurant" in tags:
        return "Restaurant"
    if tags & {"bar", "night_club"}:
        return "Bar"
    if "cafe" in tags:
        return "Cafe"
    return "Activity"


@dataclass
class VenueNormalizer:
    """Turns provider records into Place entities relative to a host."""

    api_key: str
    photo_base_url: str = DEFAULT_PHOTO_URL
    photo_max_width: int = 400

    def normalize(self, raw: dict[str, object], host: GeoPoint) -> Place:
        """Normalize a single raw venue record."""
        location = _location(raw)
        distance = haversine_km(host, location) if location else 0.0
        rating = raw.get("rating")
        return Place(
            place_id=str(raw["place_id"]),
            name=str(raw.get("name") or ""),
            photo_url=self.photo_url(raw.get("photos")),
            category=infer_category(_as_list(raw.get("types"))),
            rating=float(rating) if isinstance(rating, int | float) and rating else None,
            review_count=int(raw.get("user_ratings_total") or 0),
            address=str(
                raw.get("vicinity") or raw.get("formatted_address") or MISSING_ADDRESS
            ),
            distance_km=round_km(distance),
        )

    def normalize_all(
        self, raw_venues: list[dict[str, object]], host: GeoPoint
    ) -> list[Place]:
        """Normalize records, dropping unusable ones and duplicate place ids."""
        places: list[Place] = []
        seen: set[str] = set()
        for raw in raw_venues:
            if not raw.get("place_id"):
                _logger.warning("Skipping venue without place_id: %s", raw.get("name"))
                continue
            place = self.normalize(raw, host)
            if place.place_id in seen:
                continue
            seen.add(place.place_id)
            places.append(place)
        return places

    def photo_url(self, photos: object) -> str:
        """Build a photo URL from the first photo reference, if any."""
        for photo in _as_list(photos):
            if isinstance(photo, dict) and photo.get("photo_reference"):
                return (
                    f"{self.photo_base_url}?maxwidth={self.photo_max_width}"
                    f"&photoreference={photo['photo_reference']}&key={self.api_key}"
                )
            break
        return PLACEHOLDER_PHOTO_URL


def _as_list(value: object) -> list:
    return value if isinstance(value, list) else []


def _location(raw: dict[str, object]) -> GeoPoint | None:
    geometry = raw.get("geometry")
    if not isinstance(geometry, dict):
        return None
    location = geometry.get("location")
    if not isinstance(location, dict):
        return None
    lat = location.get("lat")
    lng = location.get("lng")
    if isinstance(lat, int | float) and isinstance(lng, int | float):
        return GeoPoint(lat=float(lat), lng=float(lng))
    return None
