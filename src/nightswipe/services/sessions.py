"""Session lifecycle: creation, join-code admission and membership checks."""

from __future__ import annotations

import logging
import secrets
import string
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from nightswipe.domain.errors import (
    AlreadyJoined,
    Forbidden,
    InvalidInput,
    InvalidJoinCode,
    InvalidState,
    NotFound,
    SelfJoin,
    SessionFull,
)
from nightswipe.domain.sessions import (
    ACTIVE,
    CANCELLED,
    COMPLETED,
    EXPIRED,
    GUEST,
    HOST,
    JOINABLE_STATUSES,
    MAX_MEMBERS,
    PENDING,
    CreatedSession,
    GeoPoint,
    MemberView,
    SessionMember,
    SessionRecord,
    SessionView,
)
from nightswipe.services.geo import is_valid_coordinate
from nightswipe.services.users import ProfileService

if TYPE_CHECKING:
    from nightswipe.services.confirmations import ConfirmationRepository

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
JOIN_CODE_LENGTH = 8
JOIN_CODE_ATTEMPTS = 5

_logger = logging.getLogger(__name__)


class SessionRepository(Protocol):
    """Persistence interface for sessions and their members.

    Methods returning ``bool`` are conditional writes: they apply only when the
    stored row still matches the expected state and report whether they did.
    """

    def create_session(
        self, host_id: str, join_code: str, host_location: GeoPoint
    ) -> SessionRecord:
        """Create a pending session together with its host member."""

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""

    def get_by_join_code(self, join_code: str) -> SessionRecord | None:
        """Return the session with exactly this join code, if present."""

    def list_members(self, session_id: str) -> list[SessionMember]:
        """Return the members of a session."""

    def add_member(
        self, session_id: str, user_id: str, role: str
    ) -> SessionMember | None:
        """Insert a member unless the role slot or the user is already taken."""

    def remove_member(self, session_id: str, user_id: str) -> None:
        """Delete a member row, if present."""

    def update_status(
        self, session_id: str, status: str, expected_statuses: Iterable[str]
    ) -> bool:
        """Set the status if the current one is among ``expected_statuses``."""

    def install_deck_seed(
        self, session_id: str, deck_seed: str, status: str | None = None
    ) -> bool:
        """Set the deck seed if none is set yet, optionally moving status."""

    def advance_epoch(  # noqa: PLR0913
        self,
        session_id: str,
        expected_seed: str,
        new_seed: str,
        counters: dict[str, int],
        status: str | None = None,
    ) -> bool:
        """Swap ``expected_seed`` for ``new_seed`` and store new counter values."""

    def list_recent_sessions(self, limit: int) -> list[SessionRecord]:
        """Return the most recently updated sessions."""


def generate_join_code() -> str:
    """Return a random 8-character join code."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))


@dataclass
class SessionService:
    """State machine for session lifecycle and membership."""

    session_repository: SessionRepository
    confirmation_repository: ConfirmationRepository
    profile_service: ProfileService
    join_url_base: str = "https://nightswipe.app/join"
    code_generator: Callable[[], str] = field(default=generate_join_code)

    def create_session(self, caller_id: str, lat: float, lng: float) -> CreatedSession:
        """Create a pending session hosted by the caller."""
        if not is_valid_coordinate(lat, lng):
            raise InvalidInput(
                "Latitude must be between -90 and 90, "
                "longitude between -180 and 180"
            )
        location = GeoPoint(lat=float(lat), lng=float(lng))
        join_code = self._unique_join_code()
        session = self.session_repository.create_session(
            host_id=caller_id, join_code=join_code, host_location=location
        )
        _logger.info("Created session %s for host %s", session.id, caller_id)
        return CreatedSession(
            session_id=session.id,
            join_code=session.join_code,
            session_url=f"{self.join_url_base.rstrip('/')}/{session.join_code}",
            host_location=session.host_location,
            status=session.status,
        )

    def resolve_by_join_code(self, join_code: str) -> tuple[SessionRecord, MemberView]:
        """Look up a session by join code and return it with its host."""
        session = self.session_repository.get_by_join_code(join_code)
        if session is None:
            raise NotFound("No session found with this join code")
        host = MemberView(
            id=session.host_id,
            role=HOST,
            display_name=self.profile_service.display_name(session.host_id),
        )
        return session, host

    def join(
        self, session_id: str, caller_id: str, join_code: str | None = None
    ) -> SessionView:
        """Admit the caller as the session's guest."""
        session = self.require_session(session_id)
        if join_code and session.join_code != join_code:
            raise InvalidJoinCode("The join code provided is incorrect")
        if session.status not in JOINABLE_STATUSES:
            raise InvalidState(f"Session is {session.status} and cannot be joined")
        if session.host_id == caller_id:
            raise SelfJoin("You are already the host of this session")
        members = self.session_repository.list_members(session_id)
        if len(members) >= MAX_MEMBERS:
            raise SessionFull(f"This session already has {MAX_MEMBERS} members")
        if any(member.user_id == caller_id for member in members):
            raise AlreadyJoined("You have already joined this session")

        added = self.session_repository.add_member(session_id, caller_id, GUEST)
        if added is None:
            members = self.session_repository.list_members(session_id)
            if any(member.user_id == caller_id for member in members):
                raise AlreadyJoined("You have already joined this session")
            raise SessionFull(f"This session already has {MAX_MEMBERS} members")

        if not self.session_repository.update_status(
            session_id, ACTIVE, JOINABLE_STATUSES
        ):
            # Session left the joinable states after it was read.
            self.session_repository.remove_member(session_id, caller_id)
            current = self.require_session(session_id)
            raise InvalidState(f"Session is {current.status} and cannot be joined")
        if session.deck_seed:
            self.confirmation_repository.clear(session_id, session.deck_seed)
        _logger.info("User %s joined session %s", caller_id, session_id)
        return self.get_session_view(session_id, caller_id)

    def get_session_view(self, session_id: str, caller_id: str) -> SessionView:
        """Return the session with member display names."""
        session, members = self.require_member(session_id, caller_id)
        views = {
            member.role: MemberView(
                id=member.user_id,
                role=member.role,
                display_name=self.profile_service.display_name(member.user_id),
            )
            for member in members
        }
        return SessionView(session=session, host=views.get(HOST), guest=views.get(GUEST))

    def cancel_session(self, session_id: str, caller_id: str) -> SessionRecord:
        """Cancel a session on behalf of its host."""
        session = self.require_session(session_id)
        if session.host_id != caller_id:
            raise Forbidden("Only the host can cancel this session")
        if not self.session_repository.update_status(
            session_id, CANCELLED, JOINABLE_STATUSES
        ):
            raise InvalidState(f"Session is {session.status} and cannot be cancelled")
        _logger.info("Session %s cancelled by host", session_id)
        return self.require_session(session_id)

    def expire_session(self, session_id: str) -> SessionRecord:
        """Mark a session expired at the request of the TTL policy."""
        session = self.require_session(session_id)
        if not self.session_repository.update_status(
            session_id, EXPIRED, {PENDING, ACTIVE, COMPLETED}
        ):
            raise InvalidState(f"Session is {session.status} and cannot be expired")
        _logger.info("Session %s expired", session_id)
        return self.require_session(session_id)

    def list_recent_sessions(self, limit: int = 20) -> list[SessionRecord]:
        """Return recently updated sessions."""
        return self.session_repository.list_recent_sessions(limit)

    def require_session(self, session_id: str) -> SessionRecord:
        """Return the session or raise ``NotFound``."""
        session = self.session_repository.get_session(session_id)
        if session is None:
            raise NotFound("The session does not exist")
        return session

    def require_member(
        self, session_id: str, caller_id: str
    ) -> tuple[SessionRecord, list[SessionMember]]:
        """Return the session and its members if the caller is one of them."""
        session = self.require_session(session_id)
        members = self.session_repository.list_members(session_id)
        if not any(member.user_id == caller_id for member in members):
            raise Forbidden("You are not a member of this session")
        return session, members

    def _unique_join_code(self) -> str:
        for _ in range(JOIN_CODE_ATTEMPTS):
            code = self.code_generator()
            if self.session_repository.get_by_join_code(code) is None:
                return code
            _logger.warning("Join code collision, regenerating")
        raise RuntimeError("Failed to generate a unique join code")
