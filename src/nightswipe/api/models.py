"""Request and response payloads for the session API."""

from pydantic import BaseModel


class CreateSessionRequest(BaseModel):
    """Body for creating a session."""

    host_lat: float
    host_lng: float


class JoinSessionRequest(BaseModel):
    """Body for joining a session."""

    join_code: str | None = None


class SwipeRequest(BaseModel):
    """Body for submitting a swipe."""

    place_id: str = ""
    direction: str = ""


class ConfirmRequest(BaseModel):
    """Optional body for load-more and restart confirmations."""

    epoch: str | None = None

