"""Supabase-backed user profile repository."""

from dataclasses import dataclass

from supabase import Client

from nightswipe.services.users import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Reads display names from the users table."""

    client: Client

    def get_display_name(self, user_id: str) -> str | None:
        """Return the stored display name, if any."""
        response = (
            self.client.table("users")
            .select("id, display_name")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        name = response.data[0].get("display_name")
        return str(name) if name else None
