"""Error taxonomy for the session engine."""

from __future__ import annotations

from typing import ClassVar


class NightSwipeError(Exception):
    """Base class for all errors surfaced to callers."""

    code: ClassVar[str] = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(NightSwipeError):
    """Malformed caller-supplied data."""

    code = "invalid_input"


class InvalidJoinCode(InvalidInput):
    """Supplied join code does not match the session."""

    code = "invalid_join_code"


class InvalidPlace(InvalidInput):
    """Place is not part of the session's current deck."""

    code = "invalid_place"


class Unauthenticated(NightSwipeError):
    """Caller credential could not be verified."""

    code = "unauthenticated"


class Forbidden(NightSwipeError):
    """Caller is authenticated but not allowed to act on the session."""

    code = "forbidden"


class NotFound(NightSwipeError):
    """Requested session or deck does not exist."""

    code = "not_found"


class DeckNotFound(NotFound):
    code = "deck_not_found"


class InvalidState(NightSwipeError):
    """Operation is not valid for the session's lifecycle phase."""

    code = "invalid_state"


class SelfJoin(InvalidState):
    code = "self_join"


class SessionFull(InvalidState):
    code = "session_full"


class DeckAlreadyGenerated(InvalidState):
    code = "deck_already_generated"


class Conflict(NightSwipeError):
    """Idempotent duplicate of an existing record."""

    code = "conflict"


class AlreadyJoined(Conflict):
    code = "already_joined"


class UpstreamUnavailable(NightSwipeError):
    """Venue lookup provider failed."""

    code = "upstream_unavailable"


class UpstreamRateLimited(UpstreamUnavailable):
    """Venue lookup provider rejected the request for quota reasons."""

    code = "upstream_rate_limited"


class NoResultsFound(NightSwipeError):
    """A valid search returned nothing."""

    code = "no_results_found"


class NoVenuesFound(NoResultsFound):
    code = "no_venues_found"
