"""Caller identity verification via Supabase Auth."""

import logging
from dataclasses import dataclass
from typing import Protocol

from supabase import AuthError, Client

from nightswipe.domain.errors import Unauthenticated

_logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    """Turns a bearer credential into a stable user id."""

    def verify(self, token: str) -> str:
        """Return the caller's user id or raise ``Unauthenticated``."""


@dataclass
class SupabaseIdentityVerifier(IdentityVerifier):
    """Validates access tokens against Supabase Auth."""

    client: Client

    def verify(self, token: str) -> str:
        """Return the user id the access token was issued to."""
        if not token:
            raise Unauthenticated("Authorization token missing")
        try:
            response = self.client.auth.get_user(token)
        except AuthError as exc:
            _logger.info("Token verification failed: %s", exc)
            raise Unauthenticated("Invalid or expired token") from exc
        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            raise Unauthenticated("Invalid or expired token")
        return str(user.id)
