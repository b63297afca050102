"""User profile lookups."""

from dataclasses import dataclass
from typing import Protocol

UNKNOWN_DISPLAY_NAME = "Unknown"


class ProfileRepository(Protocol):
    """Read access to user profiles."""

    def get_display_name(self, user_id: str) -> str | None:
        """Return the user's display name, if a profile exists."""


@dataclass
class ProfileService:
    """Resolves display names with a fallback."""

    repository: ProfileRepository

    def display_name(self, user_id: str) -> str:
        """Return a display name for the user or ``Unknown``."""
        return self.repository.get_display_name(user_id) or UNKNOWN_DISPLAY_NAME
