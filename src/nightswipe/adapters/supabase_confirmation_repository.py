"""Supabase-backed confirmation repository."""

from dataclasses import dataclass

from supabase import Client

from nightswipe.services.confirmations import ConfirmationRepository


@dataclass
class SupabaseConfirmationRepository(ConfirmationRepository):
    """Supabase implementation for load-more and restart confirmations."""

    client: Client

    def add_confirmation(
        self, session_id: str, deck_seed: str, kind: str, user_id: str
    ) -> None:
        """Upsert a confirmation, ignoring an existing one."""
        self.client.table("session_confirmations").upsert(
            {
                "session_id": session_id,
                "deck_seed": deck_seed,
                "kind": kind,
                "user_id": user_id,
            },
            on_conflict="session_id,deck_seed,kind,user_id",
            ignore_duplicates=True,
        ).execute()

    def list_confirmed(self, session_id: str, deck_seed: str, kind: str) -> list[str]:
        """Return confirming user ids in confirmation order."""
        response = (
            self.client.table("session_confirmations")
            .select("user_id, confirmed_at")
            .eq("session_id", session_id)
            .eq("deck_seed", deck_seed)
            .eq("kind", kind)
            .order("confirmed_at")
            .execute()
        )
        return [str(row["user_id"]) for row in response.data or []]

    def clear(self, session_id: str, deck_seed: str, kind: str | None = None) -> None:
        """Delete confirmations of an epoch."""
        query = (
            self.client.table("session_confirmations")
            .delete()
            .eq("session_id", session_id)
            .eq("deck_seed", deck_seed)
        )
        if kind is not None:
            query = query.eq("kind", kind)
        query.execute()
