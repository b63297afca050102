"""All-members-agree protocol behind "load more" and "restart"."""

import logging
from dataclasses import dataclass
from typing import Protocol

from nightswipe.domain.errors import InvalidInput, InvalidState
from nightswipe.domain.sessions import ACTIVE, COMPLETED, TERMINAL_STATUSES, SessionRecord
from nightswipe.domain.swipes import (
    CONFIRMATION_KINDS,
    LOAD_MORE,
    RESTART,
    ConfirmationResult,
)
from nightswipe.services.deck import DeckService
from nightswipe.services.sessions import SessionService

_COUNTER_FIELDS = {
    LOAD_MORE: "load_more_count",
    RESTART: "restart_count",
}

_logger = logging.getLogger(__name__)


class ConfirmationRepository(Protocol):
    """Persistence interface for per-epoch confirmations."""

    def add_confirmation(
        self, session_id: str, deck_seed: str, kind: str, user_id: str
    ) -> None:
        """Record a confirmation; recording the same user twice is a no-op."""

    def list_confirmed(self, session_id: str, deck_seed: str, kind: str) -> list[str]:
        """Return user ids that confirmed, in confirmation order."""

    def clear(self, session_id: str, deck_seed: str, kind: str | None = None) -> None:
        """Delete confirmations of an epoch, for one kind or all kinds."""


def counter_field(kind: str) -> str:
    """Session counter incremented when ``kind`` advances the epoch."""
    return _COUNTER_FIELDS[kind]


@dataclass
class ConfirmationService:
    """Coordinates unanimous confirmation and the resulting deck regeneration."""

    session_service: SessionService
    deck_service: DeckService
    confirmation_repository: ConfirmationRepository

    async def confirm(
        self,
        session_id: str,
        caller_id: str,
        kind: str,
        epoch: str | None = None,
    ) -> ConfirmationResult:
        """Confirm ``kind`` for the caller and regenerate once everyone agreed.

        ``epoch`` is the deck seed the caller last saw. When it differs from the
        current seed nothing is recorded and the result carries the current
        seed, so the caller can tell the deck changed by comparing seeds.
        """
        _validate_kind(kind)
        session, members = self.session_service.require_member(session_id, caller_id)
        _require_regenerable(session)
        member_ids = [member.user_id for member in members]

        if epoch and epoch != session.deck_seed:
            return ConfirmationResult(
                kind=kind,
                all_confirmed=False,
                confirmed_users=[],
                total_users=len(member_ids),
                new_deck_generated=False,
                deck_seed=session.deck_seed,
            )

        old_seed = session.deck_seed
        self.confirmation_repository.add_confirmation(
            session_id, old_seed, kind, caller_id
        )
        confirmed = self._confirmed_members(session_id, old_seed, kind, member_ids)
        if len(confirmed) < len(member_ids):
            return ConfirmationResult(
                kind=kind,
                all_confirmed=False,
                confirmed_users=confirmed,
                total_users=len(member_ids),
                new_deck_generated=False,
                deck_seed=old_seed,
            )

        advanced = await self._regenerate(session, kind)
        current = self.session_service.require_session(session_id)
        return ConfirmationResult(
            kind=kind,
            all_confirmed=True,
            confirmed_users=confirmed,
            total_users=len(member_ids),
            new_deck_generated=advanced,
            deck_seed=current.deck_seed,
        )

    def get_confirmation_status(
        self, session_id: str, caller_id: str, kind: str
    ) -> ConfirmationResult:
        """Return who has confirmed ``kind`` in the current epoch."""
        _validate_kind(kind)
        session, members = self.session_service.require_member(session_id, caller_id)
        member_ids = [member.user_id for member in members]
        confirmed: list[str] = []
        if session.deck_seed:
            confirmed = self._confirmed_members(
                session_id, session.deck_seed, kind, member_ids
            )
        return ConfirmationResult(
            kind=kind,
            all_confirmed=False,
            confirmed_users=confirmed,
            total_users=len(member_ids),
            new_deck_generated=False,
            deck_seed=session.deck_seed,
        )

    async def _regenerate(self, session: SessionRecord, kind: str) -> bool:
        old_seed = session.deck_seed
        if old_seed is None:
            raise InvalidState("There is no deck to replace")
        deck = await self.deck_service.build_deck(session, previous_seed=old_seed)
        if not self.deck_service.deck_repository.save_places(
            session.id, deck.deck_seed, deck.places
        ):
            _logger.info(
                "Deck %s of session %s was written concurrently",
                deck.deck_seed,
                session.id,
            )
            return False
        field_name = counter_field(kind)
        advanced = self.session_service.session_repository.advance_epoch(
            session.id,
            expected_seed=old_seed,
            new_seed=deck.deck_seed,
            counters={field_name: getattr(session, field_name) + 1},
            status=ACTIVE if session.status == COMPLETED else None,
        )
        if not advanced:
            self.deck_service.discard_deck(session.id, deck.deck_seed)
            _logger.info(
                "Epoch of session %s already advanced by another confirmation",
                session.id,
            )
            return False

        self.confirmation_repository.clear(session.id, old_seed, kind)
        _logger.info(
            "Session %s advanced to deck %s after %s confirmation",
            session.id,
            deck.deck_seed,
            kind,
        )
        return True

    def _confirmed_members(
        self, session_id: str, deck_seed: str, kind: str, member_ids: list[str]
    ) -> list[str]:
        confirmed = self.confirmation_repository.list_confirmed(
            session_id, deck_seed, kind
        )
        return [user_id for user_id in confirmed if user_id in member_ids]


def _validate_kind(kind: str) -> None:
    if kind not in CONFIRMATION_KINDS:
        raise InvalidInput(f"Unknown confirmation kind: {kind}")


def _require_regenerable(session: SessionRecord) -> None:
    if session.status in TERMINAL_STATUSES:
        raise InvalidState(f"Session is {session.status}")
    if not session.deck_seed:
        raise InvalidState("There is no deck to replace")
