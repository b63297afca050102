"""Tests for geospatial helpers."""

import math

import pytest

from nightswipe.domain.sessions import GeoPoint
from nightswipe.services.geo import haversine_km, is_valid_coordinate, round_km


def test_haversine_one_degree_of_latitude() -> None:
    distance = haversine_km(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=1.0, lng=0.0))

    assert distance == pytest.approx(111.195, abs=0.01)


def test_haversine_is_symmetric_and_zero_for_same_point() -> None:
    a = GeoPoint(lat=40.0, lng=-74.0)
    b = GeoPoint(lat=40.7128, lng=-74.006)

    assert haversine_km(a, a) == 0.0
    assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))


def test_round_km_rounds_half_up() -> None:
    assert round_km(1.25) == 1.3
    assert round_km(1.24) == 1.2
    assert round_km(2.349) == 2.3
    assert round_km(0.0) == 0.0


@pytest.mark.parametrize(
    ("lat", "lng", "expected"),
    [
        (40.0, -74.0, True),
        (-90, 180, True),
        (90.0001, 0.0, False),
        (0.0, -180.5, False),
        (True, 0.0, False),
        ("40", "-74", False),
        (math.nan, 0.0, False),
        (None, 0.0, False),
    ],
)
def test_is_valid_coordinate(lat: object, lng: object, expected: bool) -> None:
    assert is_valid_coordinate(lat, lng) is expected
