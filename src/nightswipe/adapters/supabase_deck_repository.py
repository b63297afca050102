"""Supabase-backed deck repository."""

from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from nightswipe.adapters.supabase_session_repository import UNIQUE_VIOLATION
from nightswipe.domain.deck import Place
from nightswipe.services.deck import DeckRepository

_PLACE_COLUMNS = (
    "place_id, name, photo_url, category, rating, review_count, address, "
    "distance_km, deck_order"
)


@dataclass
class SupabaseDeckRepository(DeckRepository):
    """Supabase implementation for deck places."""

    client: Client

    def save_places(self, session_id: str, deck_seed: str, places: list[Place]) -> bool:
        """Insert every place of the deck in a single request."""
        rows = [
            {
                "session_id": session_id,
                "deck_seed": deck_seed,
                "place_id": place.place_id,
                "name": place.name,
                "photo_url": place.photo_url,
                "category": place.category,
                "rating": place.rating,
                "review_count": place.review_count,
                "address": place.address,
                "distance_km": place.distance_km,
                "deck_order": place.order,
            }
            for place in places
        ]
        if not rows:
            return True
        try:
            self.client.table("deck_places").insert(rows).execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                return False
            raise
        return True

    def list_places(self, session_id: str, deck_seed: str) -> list[Place]:
        """Return places of the deck ordered by position."""
        response = (
            self.client.table("deck_places")
            .select(_PLACE_COLUMNS)
            .eq("session_id", session_id)
            .eq("deck_seed", deck_seed)
            .order("deck_order")
            .execute()
        )
        places = [_to_place(row) for row in response.data or []]
        return sorted(places, key=lambda place: place.order)

    def get_place(
        self, session_id: str, deck_seed: str, place_id: str
    ) -> Place | None:
        """Return a single place of the deck, if present."""
        response = (
            self.client.table("deck_places")
            .select(_PLACE_COLUMNS)
            .eq("session_id", session_id)
            .eq("deck_seed", deck_seed)
            .eq("place_id", place_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_place(response.data[0])

    def delete_places(self, session_id: str, deck_seed: str) -> None:
        """Delete all places stored under the seed."""
        self.client.table("deck_places").delete().eq("session_id", session_id).eq(
            "deck_seed", deck_seed
        ).execute()


def _to_place(row: dict[str, object]) -> Place:
    rating = row.get("rating")
    return Place(
        place_id=str(row["place_id"]),
        name=str(row.get("name") or ""),
        photo_url=str(row.get("photo_url") or ""),
        category=str(row.get("category") or ""),
        rating=float(rating) if isinstance(rating, int | float) else None,
        review_count=int(row.get("review_count") or 0),  # type: ignore[arg-type]
        address=str(row.get("address") or ""),
        distance_km=float(row.get("distance_km") or 0.0),  # type: ignore[arg-type]
        order=int(row["deck_order"]),  # type: ignore[arg-type]
    )
