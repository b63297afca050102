"""Deck generation and retrieval."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from nightswipe.adapters.places_client import PlacesClient
from nightswipe.domain.deck import Deck, Place
from nightswipe.domain.errors import (
    DeckAlreadyGenerated,
    DeckNotFound,
    InvalidState,
    NoVenuesFound,
)
from nightswipe.domain.sessions import ACTIVE, JOINABLE_STATUSES, PENDING, SessionRecord
from nightswipe.services.sessions import SessionService
from nightswipe.services.shuffle import shuffle_with_seed
from nightswipe.services.venues import VenueNormalizer

DEFAULT_TYPE_FILTER = "restaurant|bar|night_club|cafe"

_logger = logging.getLogger(__name__)


class DeckRepository(Protocol):
    """Persistence interface for deck places, keyed by deck seed."""

    def save_places(self, session_id: str, deck_seed: str, places: list[Place]) -> bool:
        """Store all places of a deck in one write.

        Returns False when rows under ``deck_seed`` already exist.
        """

    def list_places(self, session_id: str, deck_seed: str) -> list[Place]:
        """Return the deck's places ordered by position."""

    def get_place(
        self, session_id: str, deck_seed: str, place_id: str
    ) -> Place | None:
        """Return a place of the deck, if present."""

    def delete_places(self, session_id: str, deck_seed: str) -> None:
        """Remove every place stored under the seed."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def build_deck_seed(session: SessionRecord, generated_at: datetime) -> str:
    """Combine host coordinates and generation time into a seed string."""
    millis = int(generated_at.timestamp() * 1000)
    return f"{session.host_location.lat}_{session.host_location.lng}_{millis}"


@dataclass
class DeckService:
    """Builds, stores and serves the shuffled deck of a session."""

    session_service: SessionService
    deck_repository: DeckRepository
    places_client: PlacesClient
    normalizer: VenueNormalizer
    primary_radius_m: int = 5000
    fallback_radius_m: int = 10000
    min_results: int = 20
    max_places: int = 25
    type_filter: str = DEFAULT_TYPE_FILTER
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def generate_deck(self, session_id: str, caller_id: str) -> Deck:
        """Generate the first deck of the current epoch."""
        session, _ = self.session_service.require_member(session_id, caller_id)
        if session.status not in JOINABLE_STATUSES:
            raise InvalidState(f"Session is {session.status}")
        if session.deck_seed:
            raise DeckAlreadyGenerated(
                "This session already has a deck. Use GET to retrieve it."
            )

        deck = await self.build_deck(session)
        if not self.deck_repository.save_places(
            session_id, deck.deck_seed, deck.places
        ):
            raise DeckAlreadyGenerated("A deck was generated concurrently")
        installed = self.session_service.session_repository.install_deck_seed(
            session_id,
            deck.deck_seed,
            status=ACTIVE if session.status == PENDING else None,
        )
        if not installed:
            self.discard_deck(session_id, deck.deck_seed)
            raise DeckAlreadyGenerated("A deck was generated concurrently")

        _logger.info(
            "Generated deck with %s places for session %s",
            deck.total_count,
            session_id,
        )
        return deck

    def get_deck(self, session_id: str, caller_id: str) -> Deck:
        """Return the current deck ordered by position."""
        session, _ = self.session_service.require_member(session_id, caller_id)
        if not session.deck_seed:
            raise DeckNotFound("Deck has not been generated for this session yet")
        places = self.deck_repository.list_places(session_id, session.deck_seed)
        return Deck(session_id=session_id, deck_seed=session.deck_seed, places=places)

    async def build_deck(
        self, session: SessionRecord, previous_seed: str | None = None
    ) -> Deck:
        """Fetch, normalize and shuffle venues around the host location."""
        location = session.host_location
        raw_venues = await self.places_client.search_nearby(
            location.lat, location.lng, self.primary_radius_m, self.type_filter
        )
        if len(raw_venues) < self.min_results:
            _logger.info(
                "Only %s places found within %sm, expanding to %sm",
                len(raw_venues),
                self.primary_radius_m,
                self.fallback_radius_m,
            )
            raw_venues = await self.places_client.search_nearby(
                location.lat, location.lng, self.fallback_radius_m, self.type_filter
            )

        places = self.normalizer.normalize_all(raw_venues, location)[: self.max_places]
        if not places:
            raise NoVenuesFound(
                "No restaurants, bars, or cafes found in your area. "
                "Try a different location."
            )

        generated_at = self.clock()
        deck_seed = build_deck_seed(session, generated_at)
        while deck_seed == previous_seed:
            generated_at += timedelta(milliseconds=1)
            deck_seed = build_deck_seed(session, generated_at)
        ordered = [
            place.with_order(index)
            for index, place in enumerate(shuffle_with_seed(places, deck_seed))
        ]
        return Deck(session_id=session.id, deck_seed=deck_seed, places=ordered)

    def discard_deck(self, session_id: str, deck_seed: str) -> None:
        """Remove rows of a deck that lost the race to become current."""
        current = self.session_service.session_repository.get_session(session_id)
        if current is not None and current.deck_seed == deck_seed:
            return
        self.deck_repository.delete_places(session_id, deck_seed)
        _logger.info("Discarded uncommitted deck %s for session %s", deck_seed, session_id)
