"""Tests for venue normalization."""

import pytest

from nightswipe.domain.sessions import GeoPoint
from nightswipe.services.venues import (
    MISSING_ADDRESS,
    PLACEHOLDER_PHOTO_URL,
    VenueNormalizer,
    infer_category,
)
from tests.conftest import make_raw_venue

HOST = GeoPoint(lat=40.0, lng=-74.0)


@pytest.mark.parametrize(
    ("types", "expected"),
    [
        (["bar", "restaurant"], "Restaurant"),
        (["cafe", "bar"], "Bar"),
        (["night_club"], "Bar"),
        (["cafe", "food"], "Cafe"),
        (["museum"], "Activity"),
        (None, "Activity"),
    ],
)
def test_infer_category_priority(types: list[str] | None, expected: str) -> None:
    assert infer_category(types) == expected


def test_normalize_maps_provider_fields() -> None:
    normalizer = VenueNormalizer(api_key="places-key")

    place = normalizer.normalize(make_raw_venue(1), HOST)

    assert place.place_id == "place-1"
    assert place.name == "Venue 1"
    assert place.category == "Restaurant"
    assert place.rating == 4.5
    assert place.review_count == 10
    assert place.address == "1 Main St"
    assert place.distance_km == 0.1
    assert place.photo_url == (
        "https://maps.googleapis.com/maps/api/place/photo?maxwidth=400"
        "&photoreference=photo-ref-1&key=places-key"
    )


def test_normalize_fills_missing_fields() -> None:
    raw = make_raw_venue(2, rating=None, photo_reference=None)
    raw.pop("vicinity")
    raw.pop("user_ratings_total")
    normalizer = VenueNormalizer(api_key="places-key")

    place = normalizer.normalize(raw, HOST)

    assert place.rating is None
    assert place.review_count == 0
    assert place.address == MISSING_ADDRESS
    assert place.photo_url == PLACEHOLDER_PHOTO_URL


def test_normalize_prefers_formatted_address_over_placeholder() -> None:
    raw = make_raw_venue(3)
    raw.pop("vicinity")
    raw["formatted_address"] = "3 Main St, Springfield"

    place = VenueNormalizer(api_key="k").normalize(raw, HOST)

    assert place.address == "3 Main St, Springfield"


def test_normalize_treats_zero_rating_as_unrated() -> None:
    place = VenueNormalizer(api_key="k").normalize(make_raw_venue(4, rating=0), HOST)

    assert place.rating is None


def test_normalize_all_skips_invalid_and_duplicate_records() -> None:
    raw_venues = [
        make_raw_venue(1),
        {"name": "No id"},
        make_raw_venue(2),
        make_raw_venue(1),
    ]

    places = VenueNormalizer(api_key="k").normalize_all(raw_venues, HOST)

    assert [place.place_id for place in places] == ["place-1", "place-2"]
