"""Supabase-backed swipe repository."""

from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from nightswipe.adapters.supabase_session_repository import (
    UNIQUE_VIOLATION,
    parse_timestamp,
)
from nightswipe.domain.swipes import SwipeRecord
from nightswipe.services.swipes import SwipeRepository

_SWIPE_COLUMNS = "id, session_id, user_id, place_id, direction, deck_seed, swiped_at"


@dataclass
class SupabaseSwipeRepository(SwipeRepository):
    """Supabase implementation for swipes."""

    client: Client

    def create_swipe(  # noqa: PLR0913
        self,
        session_id: str,
        user_id: str,
        place_id: str,
        direction: str,
        deck_seed: str,
    ) -> SwipeRecord | None:
        """Insert a swipe row; a unique violation means it already exists."""
        try:
            response = (
                self.client.table("swipes")
                .insert(
                    {
                        "session_id": session_id,
                        "user_id": user_id,
                        "place_id": place_id,
                        "direction": direction,
                        "deck_seed": deck_seed,
                    }
                )
                .execute()
            )
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                return None
            raise
        if not response.data:
            raise RuntimeError("Failed to create swipe")
        return _to_swipe(response.data[0])

    def get_swipe(
        self, session_id: str, user_id: str, place_id: str, deck_seed: str
    ) -> SwipeRecord | None:
        """Return the swipe stored for the key, if present."""
        response = (
            self.client.table("swipes")
            .select(_SWIPE_COLUMNS)
            .eq("session_id", session_id)
            .eq("user_id", user_id)
            .eq("place_id", place_id)
            .eq("deck_seed", deck_seed)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_swipe(response.data[0])

    def list_swipes(self, session_id: str, deck_seed: str) -> list[SwipeRecord]:
        """Return swipes made against one deck."""
        response = (
            self.client.table("swipes")
            .select(_SWIPE_COLUMNS)
            .eq("session_id", session_id)
            .eq("deck_seed", deck_seed)
            .execute()
        )
        return [_to_swipe(row) for row in response.data or []]


def _to_swipe(row: dict[str, object]) -> SwipeRecord:
    return SwipeRecord(
        id=str(row["id"]),
        session_id=str(row["session_id"]),
        user_id=str(row["user_id"]),
        place_id=str(row["place_id"]),
        direction=str(row["direction"]),
        deck_seed=str(row["deck_seed"]),
        swiped_at=parse_timestamp(row.get("swiped_at")),
    )
