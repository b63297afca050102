"""Domain models for swipe sessions."""

from dataclasses import dataclass
from datetime import datetime

PENDING = "pending"
ACTIVE = "active"
COMPLETED = "completed"
CANCELLED = "cancelled"
EXPIRED = "expired"

SESSION_STATUSES = frozenset({PENDING, ACTIVE, COMPLETED, CANCELLED, EXPIRED})
JOINABLE_STATUSES = frozenset({PENDING, ACTIVE})
TERMINAL_STATUSES = frozenset({CANCELLED, EXPIRED})

HOST = "host"
GUEST = "guest"

MAX_MEMBERS = 2


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted swipe session."""

    id: str
    host_id: str
    join_code: str
    host_location: GeoPoint
    deck_seed: str | None
    status: str
    load_more_count: int
    restart_count: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class SessionMember:
    """A user admitted to a session."""

    session_id: str
    user_id: str
    role: str
    joined_at: datetime


@dataclass(frozen=True)
class MemberView:
    """Member with a resolved display name."""

    id: str
    role: str
    display_name: str


@dataclass(frozen=True)
class CreatedSession:
    """Result of creating a session."""

    session_id: str
    join_code: str
    session_url: str
    host_location: GeoPoint
    status: str


@dataclass(frozen=True)
class SessionView:
    """Merged session and member profile view."""

    session: SessionRecord
    host: MemberView | None
    guest: MemberView | None
