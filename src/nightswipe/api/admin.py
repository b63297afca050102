"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from nightswipe.containers import AppContainer
    from nightswipe.domain.sessions import SessionRecord

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request, limit: int = 20) -> dict[str, object]:
    """Return recently updated sessions."""
    container: AppContainer = request.app.state.container
    sessions = container.session_service.list_recent_sessions(limit)
    return {"sessions": [_serialize_session(session) for session in sessions]}


@router.post("/sessions/{session_id}/expire", dependencies=[Depends(require_admin)])
async def expire_session(session_id: str, request: Request) -> dict[str, object]:
    """Expire a session; called by the TTL policy."""
    container: AppContainer = request.app.state.container
    session = container.session_service.expire_session(session_id)
    return _serialize_session(session)


def _serialize_session(session: SessionRecord) -> dict[str, object]:
    return {
        "id": session.id,
        "host_id": session.host_id,
        "status": session.status,
        "deck_seed": session.deck_seed,
        "load_more_count": session.load_more_count,
        "restart_count": session.restart_count,
        "updated_at": session.updated_at.isoformat(),
    }
