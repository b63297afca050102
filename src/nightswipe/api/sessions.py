"""Session API endpoints for host and guest clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from nightswipe.api.errors import error_body
from nightswipe.api.models import (
    ConfirmRequest,
    CreateSessionRequest,
    JoinSessionRequest,
    SwipeRequest,
)
from nightswipe.domain.errors import Unauthenticated
from nightswipe.domain.swipes import LOAD_MORE, RESTART

if TYPE_CHECKING:
    from nightswipe.containers import AppContainer
    from nightswipe.domain.deck import Deck, Place
    from nightswipe.domain.sessions import MemberView, SessionView
    from nightswipe.domain.swipes import ConfirmationResult, SwipeRecord

router = APIRouter(prefix="/api/v1", tags=["session"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_caller(
    request: Request, authorization: str | None = Header(default=None)
) -> str:
    """Resolve the verified caller id from a bearer token."""
    if not authorization:
        raise Unauthenticated("Authorization header missing")
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise Unauthenticated("Expected format: Bearer <token>")
    return _container(request).identity_verifier.verify(token.strip())


@router.post("/session", status_code=status.HTTP_201_CREATED)
async def create_session(
    body: CreateSessionRequest,
    request: Request,
    caller_id: str = Depends(require_caller),
) -> dict[str, object]:
    """Create a session hosted by the caller."""
    created = _container(request).session_service.create_session(
        caller_id, body.host_lat, body.host_lng
    )
    return {
        "session_id": created.session_id,
        "join_code": created.join_code,
        "session_url": created.session_url,
        "host_location": {
            "lat": created.host_location.lat,
            "lng": created.host_location.lng,
        },
        "status": created.status,
    }


@router.get("/session/by-code/{join_code}")
async def session_by_code(
    join_code: str, request: Request, _caller_id: str = Depends(require_caller)
) -> dict[str, object]:
    """Look up a session for the guest deep-link flow."""
    session, host = _container(request).session_service.resolve_by_join_code(
        join_code
    )
    return {
        "session_id": session.id,
        "join_code": session.join_code,
        "status": session.status,
        "host": _serialize_member(host),
    }


@router.post("/session/{session_id}/join")
async def join_session(
    session_id: str,
    request: Request,
    body: JoinSessionRequest | None = None,
    caller_id: str = Depends(require_caller),
) -> dict[str, object]:
    """Join a session as its guest."""
    view = _container(request).session_service.join(
        session_id, caller_id, body.join_code if body else None
    )
    return {
        "session_id": view.session.id,
        "status": view.session.status,
        "host": _serialize_member(view.host),
        "guest": _serialize_member(view.guest),
    }


@router.get("/session/{session_id}")
async def get_session(
    session_id: str, request: Request, caller_id: str = Depends(require_caller)
) -> dict[str, object]:
    """Return session details for a member."""
    view = _container(request).session_service.get_session_view(
        session_id, caller_id
    )
    return _serialize_view(view)


@router.post("/session/{session_id}/cancel")
async def cancel_session(
    session_id: str, request: Request, caller_id: str = Depends(require_caller)
) -> dict[str, object]:
    """Cancel a session on behalf of its host."""
    session = _container(request).session_service.cancel_session(
        session_id, caller_id
    )
    return {"session_id": session.id, "status": session.status}


@router.post("/session/{session_id}/deck")
async def generate_deck(
    session_id: str, request: Request, caller_id: str = Depends(require_caller)
) -> dict[str, object]:
    """Generate the session deck."""
    deck = await _container(request).deck_service.generate_deck(
        session_id, caller_id
    )
    return _serialize_deck(deck)


@router.get("/session/{session_id}/deck")
async def get_deck(
    session_id: str, request: Request, caller_id: str = Depends(require_caller)
) -> dict[str, object]:
    """Return the current deck."""
    deck = _container(request).deck_service.get_deck(session_id, caller_id)
    return _serialize_deck(deck)


@router.post("/session/{session_id}/swipe", response_model=None)
async def submit_swipe(
    session_id: str,
    body: SwipeRequest,
    request: Request,
    caller_id: str = Depends(require_caller),
) -> dict[str, object] | JSONResponse:
    """Record a swipe; a repeated swipe answers 409 with the stored one."""
    outcome = _container(request).swipe_service.submit_swipe(
        session_id, caller_id, body.place_id, body.direction
    )
    payload = _serialize_swipe(outcome.swipe)
    if outcome.duplicate:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                **error_body("duplicate_swipe", "You have already swiped on this place"),
                "swipe": payload,
            },
        )
    return payload


@router.get("/session/{session_id}/status")
async def session_status(
    session_id: str, request: Request, caller_id: str = Depends(require_caller)
) -> dict[str, object]:
    """Return completion progress for every member."""
    result = _container(request).match_service.get_status(session_id, caller_id)
    return {
        "session_id": result.session_id,
        "status": result.status,
        "session_status": result.session_status,
        "deck_seed": result.deck_seed,
        "users": [
            {
                "user_id": user.user_id,
                "display_name": user.display_name,
                "role": user.role,
                "swipes_count": user.swipes_count,
                "deck_size": user.deck_size,
                "finished": user.finished,
            }
            for user in result.users
        ],
    }


@router.get("/session/{session_id}/matches")
async def session_matches(
    session_id: str, request: Request, caller_id: str = Depends(require_caller)
) -> dict[str, object]:
    """Return places every member swiped right on."""
    result = _container(request).match_service.calculate_matches(
        session_id, caller_id
    )
    return {
        "session_id": result.session_id,
        "matches": [_serialize_place(place) for place in result.matches],
        "match_count": result.match_count,
    }


@router.post("/session/{session_id}/load-more-confirm")
async def confirm_load_more(
    session_id: str,
    request: Request,
    body: ConfirmRequest | None = None,
    caller_id: str = Depends(require_caller),
) -> dict[str, object]:
    """Confirm loading a fresh deck."""
    result = await _container(request).confirmation_service.confirm(
        session_id, caller_id, LOAD_MORE, epoch=body.epoch if body else None
    )
    return _serialize_confirmation(result)


@router.post("/session/{session_id}/restart-confirm")
async def confirm_restart(
    session_id: str,
    request: Request,
    body: ConfirmRequest | None = None,
    caller_id: str = Depends(require_caller),
) -> dict[str, object]:
    """Confirm restarting the session with a fresh deck."""
    result = await _container(request).confirmation_service.confirm(
        session_id, caller_id, RESTART, epoch=body.epoch if body else None
    )
    return _serialize_confirmation(result)


@router.get("/session/{session_id}/confirmations/{kind}")
async def confirmation_status(
    session_id: str,
    kind: str,
    request: Request,
    caller_id: str = Depends(require_caller),
) -> dict[str, object]:
    """Return who confirmed ``kind`` in the current epoch."""
    result = _container(request).confirmation_service.get_confirmation_status(
        session_id, caller_id, kind
    )
    return _serialize_confirmation(result)


def _serialize_member(member: MemberView | None) -> dict[str, str] | None:
    if member is None:
        return None
    return {"id": member.id, "display_name": member.display_name}


def _serialize_view(view: SessionView) -> dict[str, object]:
    session = view.session
    return {
        "session_id": session.id,
        "status": session.status,
        "join_code": session.join_code,
        "host": _serialize_member(view.host),
        "guest": _serialize_member(view.guest),
        "deck_seed": session.deck_seed,
        "load_more_count": session.load_more_count,
        "restart_count": session.restart_count,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
        "host_location": {
            "lat": session.host_location.lat,
            "lng": session.host_location.lng,
        },
    }


def _serialize_place(place: Place) -> dict[str, object]:
    return {
        "place_id": place.place_id,
        "name": place.name,
        "photo_url": place.photo_url,
        "category": place.category,
        "rating": place.rating,
        "review_count": place.review_count,
        "address": place.address,
        "distance_km": place.distance_km,
        "order": place.order,
    }


def _serialize_deck(deck: Deck) -> dict[str, object]:
    return {
        "session_id": deck.session_id,
        "deck": [_serialize_place(place) for place in deck.places],
        "deck_seed": deck.deck_seed,
        "total_count": deck.total_count,
    }


def _serialize_swipe(swipe: SwipeRecord) -> dict[str, object]:
    return {
        "swipe_id": swipe.id,
        "session_id": swipe.session_id,
        "user_id": swipe.user_id,
        "place_id": swipe.place_id,
        "direction": swipe.direction,
        "swiped_at": swipe.swiped_at.isoformat(),
    }


def _serialize_confirmation(result: ConfirmationResult) -> dict[str, object]:
    return {
        "kind": result.kind,
        "all_confirmed": result.all_confirmed,
        "confirmed_users": result.confirmed_users,
        "total_users": result.total_users,
        "new_deck_generated": result.new_deck_generated,
        "deck_seed": result.deck_seed,
    }
