"""Swipe ledger with idempotent submission."""

import logging
from dataclasses import dataclass
from typing import Protocol

from nightswipe.domain.errors import (
    DeckNotFound,
    InvalidInput,
    InvalidPlace,
    InvalidState,
)
from nightswipe.domain.sessions import JOINABLE_STATUSES
from nightswipe.domain.swipes import DIRECTIONS, SwipeOutcome, SwipeRecord
from nightswipe.services.deck import DeckRepository
from nightswipe.services.sessions import SessionService

_logger = logging.getLogger(__name__)


class SwipeRepository(Protocol):
    """Persistence interface for swipes.

    ``(session_id, user_id, place_id, deck_seed)`` is unique.
    """

    def create_swipe(  # noqa: PLR0913
        self,
        session_id: str,
        user_id: str,
        place_id: str,
        direction: str,
        deck_seed: str,
    ) -> SwipeRecord | None:
        """Insert a swipe, returning None if one already exists for the key."""

    def get_swipe(
        self, session_id: str, user_id: str, place_id: str, deck_seed: str
    ) -> SwipeRecord | None:
        """Return the swipe stored for the key, if present."""

    def list_swipes(self, session_id: str, deck_seed: str) -> list[SwipeRecord]:
        """Return all swipes of a session made against one deck."""


@dataclass
class SwipeService:
    """Records swipe decisions against the current deck."""

    session_service: SessionService
    deck_repository: DeckRepository
    swipe_repository: SwipeRepository

    def submit_swipe(
        self, session_id: str, caller_id: str, place_id: str, direction: str
    ) -> SwipeOutcome:
        """Record a swipe, or return the stored one for a repeated key."""
        if direction not in DIRECTIONS:
            raise InvalidInput('direction must be "left" or "right"')
        if not place_id or not isinstance(place_id, str):
            raise InvalidInput("place_id is required and must be a string")

        session, _ = self.session_service.require_member(session_id, caller_id)
        if session.status not in JOINABLE_STATUSES:
            raise InvalidState(f"Session is {session.status}")
        if not session.deck_seed:
            raise DeckNotFound("Deck has not been generated for this session yet")
        deck_seed = session.deck_seed
        if self.deck_repository.get_place(session_id, deck_seed, place_id) is None:
            raise InvalidPlace("place_id does not exist in this session's deck")

        existing = self.swipe_repository.get_swipe(
            session_id, caller_id, place_id, deck_seed
        )
        if existing is not None:
            return SwipeOutcome(swipe=existing, duplicate=True)

        created = self.swipe_repository.create_swipe(
            session_id=session_id,
            user_id=caller_id,
            place_id=place_id,
            direction=direction,
            deck_seed=deck_seed,
        )
        if created is None:
            # Lost an insert race on the same key.
            existing = self.swipe_repository.get_swipe(
                session_id, caller_id, place_id, deck_seed
            )
            if existing is None:
                raise RuntimeError("Swipe conflict reported but no swipe stored")
            return SwipeOutcome(swipe=existing, duplicate=True)

        _logger.debug(
            "Swipe %s on %s by %s in session %s",
            direction,
            place_id,
            caller_id,
            session_id,
        )
        return SwipeOutcome(swipe=created, duplicate=False)
