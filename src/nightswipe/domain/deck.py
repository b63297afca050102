"""Domain models for session decks."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Place:
    """A venue card in a session deck."""

    place_id: str
    name: str
    photo_url: str
    category: str
    rating: float | None
    review_count: int
    address: str
    distance_km: float
    order: int = 0

    def with_order(self, order: int) -> "Place":
        return replace(self, order=order)


@dataclass(frozen=True)
class Deck:
    """The ordered deck of a session epoch."""

    session_id: str
    deck_seed: str
    places: list[Place]

    @property
    def total_count(self) -> int:
        return len(self.places)
