"""Supabase-backed session repository."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from postgrest.exceptions import APIError
from supabase import Client

from nightswipe.domain.sessions import (
    HOST,
    PENDING,
    GeoPoint,
    SessionMember,
    SessionRecord,
)
from nightswipe.services.sessions import SessionRepository

UNIQUE_VIOLATION = "23505"

_SESSION_COLUMNS = (
    "id, host_id, join_code, host_lat, host_lng, deck_seed, status, "
    "load_more_count, restart_count, created_at, updated_at"
)

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for sessions and session members."""

    client: Client

    def create_session(
        self, host_id: str, join_code: str, host_location: GeoPoint
    ) -> SessionRecord:
        """Create a session row and its host member row."""
        response = (
            self.client.table("sessions")
            .insert(
                {
                    "host_id": host_id,
                    "join_code": join_code,
                    "host_lat": host_location.lat,
                    "host_lng": host_location.lng,
                    "deck_seed": None,
                    "status": PENDING,
                    "load_more_count": 0,
                    "restart_count": 0,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")
        session = _to_session(response.data[0])
        try:
            host = self.add_member(session.id, host_id, HOST)
        except Exception:
            self._delete_session(session.id)
            raise
        if host is None:
            self._delete_session(session.id)
            raise RuntimeError("Failed to add host to session")
        return session

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("sessions")
            .select(_SESSION_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_session(response.data[0])

    def get_by_join_code(self, join_code: str) -> SessionRecord | None:
        """Return the session with the join code, if present."""
        response = (
            self.client.table("sessions")
            .select(_SESSION_COLUMNS)
            .eq("join_code", join_code)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_session(response.data[0])

    def list_members(self, session_id: str) -> list[SessionMember]:
        """Return members ordered by join time."""
        response = (
            self.client.table("session_members")
            .select("session_id, user_id, role, joined_at")
            .eq("session_id", session_id)
            .order("joined_at")
            .execute()
        )
        return [_to_member(row) for row in response.data or []]

    def add_member(
        self, session_id: str, user_id: str, role: str
    ) -> SessionMember | None:
        """Insert a member; unique constraints reject a taken slot."""
        try:
            response = (
                self.client.table("session_members")
                .insert({"session_id": session_id, "user_id": user_id, "role": role})
                .execute()
            )
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                _logger.info(
                    "Member insert rejected for session %s user %s", session_id, user_id
                )
                return None
            raise
        if not response.data:
            return None
        return _to_member(response.data[0])

    def remove_member(self, session_id: str, user_id: str) -> None:
        """Delete a member row."""
        self.client.table("session_members").delete().eq("session_id", session_id).eq(
            "user_id", user_id
        ).execute()

    def update_status(
        self, session_id: str, status: str, expected_statuses: Iterable[str]
    ) -> bool:
        """Update the status if the stored one is expected."""
        response = (
            self.client.table("sessions")
            .update({"status": status, "updated_at": _now()})
            .eq("id", session_id)
            .in_("status", sorted(expected_statuses))
            .execute()
        )
        return bool(response.data)

    def install_deck_seed(
        self, session_id: str, deck_seed: str, status: str | None = None
    ) -> bool:
        """Set the deck seed only while none is set."""
        payload: dict[str, object] = {"deck_seed": deck_seed, "updated_at": _now()}
        if status is not None:
            payload["status"] = status
        response = (
            self.client.table("sessions")
            .update(payload)
            .eq("id", session_id)
            .is_("deck_seed", "null")
            .execute()
        )
        return bool(response.data)

    def advance_epoch(  # noqa: PLR0913
        self,
        session_id: str,
        expected_seed: str,
        new_seed: str,
        counters: dict[str, int],
        status: str | None = None,
    ) -> bool:
        """Replace the deck seed only if it is still ``expected_seed``."""
        payload: dict[str, object] = {
            "deck_seed": new_seed,
            "updated_at": _now(),
            **counters,
        }
        if status is not None:
            payload["status"] = status
        response = (
            self.client.table("sessions")
            .update(payload)
            .eq("id", session_id)
            .eq("deck_seed", expected_seed)
            .execute()
        )
        return bool(response.data)

    def list_recent_sessions(self, limit: int) -> list[SessionRecord]:
        """Return recently updated sessions."""
        response = (
            self.client.table("sessions")
            .select(_SESSION_COLUMNS)
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_to_session(row) for row in response.data or []]

    def _delete_session(self, session_id: str) -> None:
        _logger.warning("Removing session %s without a host member", session_id)
        self.client.table("sessions").delete().eq("id", session_id).execute()


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


def parse_timestamp(value: object) -> datetime:
    """Parse a timestamp column, defaulting to now when absent."""
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return datetime.now(tz=UTC)


def _to_session(row: dict[str, object]) -> SessionRecord:
    return SessionRecord(
        id=str(row["id"]),
        host_id=str(row["host_id"]),
        join_code=str(row["join_code"]),
        host_location=GeoPoint(
            lat=float(row["host_lat"]),  # type: ignore[arg-type]
            lng=float(row["host_lng"]),  # type: ignore[arg-type]
        ),
        deck_seed=row.get("deck_seed") or None,  # type: ignore[arg-type]
        status=str(row["status"]),
        load_more_count=int(row.get("load_more_count") or 0),  # type: ignore[arg-type]
        restart_count=int(row.get("restart_count") or 0),  # type: ignore[arg-type]
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def _to_member(row: dict[str, object]) -> SessionMember:
    return SessionMember(
        session_id=str(row["session_id"]),
        user_id=str(row["user_id"]),
        role=str(row["role"]),
        joined_at=parse_timestamp(row.get("joined_at")),
    )
