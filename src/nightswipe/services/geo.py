"""Geospatial helpers."""

from math import atan2, cos, floor, radians, sin, sqrt

from nightswipe.domain.sessions import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in kilometres between two points."""
    dlat = radians(b.lat - a.lat)
    dlng = radians(b.lng - a.lng)
    h = (
        sin(dlat / 2) ** 2
        + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(dlng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def round_km(distance_km: float) -> float:
    """Round half-up to one decimal kilometre."""
    return floor(distance_km * 10 + 0.5) / 10


def is_valid_coordinate(lat: object, lng: object) -> bool:
    """Return True for numeric lat/lng within the WGS84 range."""
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, int | float):
            return False
        if value != value:  # NaN
            return False
    return -90 <= lat <= 90 and -180 <= lng <= 180  # type: ignore[operator]
