"""Mapping of engine errors onto HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nightswipe.domain.errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    InvalidState,
    NightSwipeError,
    NoResultsFound,
    NotFound,
    Unauthenticated,
    UpstreamRateLimited,
    UpstreamUnavailable,
)

# Most specific class first; first match wins.
ERROR_STATUS_RULES: list[tuple[type[NightSwipeError], int]] = [
    (UpstreamRateLimited, status.HTTP_429_TOO_MANY_REQUESTS),
    (UpstreamUnavailable, status.HTTP_502_BAD_GATEWAY),
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (InvalidState, status.HTTP_400_BAD_REQUEST),
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (NoResultsFound, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
]

_logger = logging.getLogger(__name__)


def status_for(exc: NightSwipeError) -> int:
    """Return the HTTP status code for an engine error."""
    for error_type, status_code in ERROR_STATUS_RULES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code: str, message: str) -> dict[str, str]:
    return {"error": code, "message": message}


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers rendering errors as ``{"error", "message"}`` bodies."""

    @app.exception_handler(NightSwipeError)
    async def handle_engine_error(
        request: Request, exc: NightSwipeError
    ) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            _logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code, content=error_body(exc.code, exc.message)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(InvalidInput.code, details),
        )
