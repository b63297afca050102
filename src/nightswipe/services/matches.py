"""Completion detection and match calculation."""

import logging
from collections import defaultdict
from dataclasses import dataclass

from nightswipe.domain.errors import InvalidState
from nightswipe.domain.sessions import ACTIVE, COMPLETED, PENDING
from nightswipe.domain.swipes import RIGHT, MatchResult, MemberProgress, SessionStatus
from nightswipe.services.deck import DeckRepository
from nightswipe.services.sessions import SessionService
from nightswipe.services.swipes import SwipeRepository
from nightswipe.services.users import ProfileService

_logger = logging.getLogger(__name__)


@dataclass
class MatchService:
    """Derives completion and matches from the swipe ledger on every read."""

    session_service: SessionService
    deck_repository: DeckRepository
    swipe_repository: SwipeRepository
    profile_service: ProfileService

    def get_status(self, session_id: str, caller_id: str) -> SessionStatus:
        """Return per-member progress for the current epoch."""
        session, members = self.session_service.require_member(session_id, caller_id)
        deck_size = 0
        swiped: dict[str, set[str]] = defaultdict(set)
        if session.deck_seed:
            places = self.deck_repository.list_places(session_id, session.deck_seed)
            deck_ids = {place.place_id for place in places}
            deck_size = len(places)
            for swipe in self.swipe_repository.list_swipes(
                session_id, session.deck_seed
            ):
                if swipe.place_id in deck_ids:
                    swiped[swipe.user_id].add(swipe.place_id)

        users = [
            MemberProgress(
                user_id=member.user_id,
                display_name=self.profile_service.display_name(member.user_id),
                role=member.role,
                swipes_count=len(swiped[member.user_id]),
                deck_size=deck_size,
                finished=bool(session.deck_seed)
                and len(swiped[member.user_id]) >= deck_size,
            )
            for member in members
        ]
        all_finished = bool(users) and all(user.finished for user in users)
        return SessionStatus(
            session_id=session_id,
            status=COMPLETED if all_finished else ACTIVE,
            session_status=session.status,
            deck_seed=session.deck_seed,
            users=users,
        )

    def calculate_matches(self, session_id: str, caller_id: str) -> MatchResult:
        """Return places every member swiped right on."""
        status = self.get_status(session_id, caller_id)
        if status.status != COMPLETED or status.deck_seed is None:
            raise InvalidState("All members must finish swiping before matching")

        rights: dict[str, set[str]] = {user.user_id: set() for user in status.users}
        for swipe in self.swipe_repository.list_swipes(session_id, status.deck_seed):
            if swipe.direction == RIGHT and swipe.user_id in rights:
                rights[swipe.user_id].add(swipe.place_id)
        matched_ids = set.intersection(*rights.values()) if rights else set()

        places = self.deck_repository.list_places(session_id, status.deck_seed)
        matches = [place for place in places if place.place_id in matched_ids]
        if matches:
            self.session_service.session_repository.update_status(
                session_id, COMPLETED, {PENDING, ACTIVE}
            )
        _logger.info("Session %s has %s matches", session_id, len(matches))
        return MatchResult(session_id=session_id, matches=matches)
