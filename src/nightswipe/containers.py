"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nightswipe.adapters.places_client import HttpxPlacesClient
from nightswipe.adapters.supabase_confirmation_repository import (
    SupabaseConfirmationRepository,
)
from nightswipe.adapters.supabase_deck_repository import SupabaseDeckRepository
from nightswipe.adapters.supabase_identity_verifier import (
    IdentityVerifier,
    SupabaseIdentityVerifier,
)
from nightswipe.adapters.supabase_profile_repository import SupabaseProfileRepository
from nightswipe.adapters.supabase_session_repository import SupabaseSessionRepository
from nightswipe.adapters.supabase_swipe_repository import SupabaseSwipeRepository
from nightswipe.config import Settings
from nightswipe.services.confirmations import ConfirmationService
from nightswipe.services.deck import DeckService
from nightswipe.services.matches import MatchService
from nightswipe.services.sessions import SessionService
from nightswipe.services.swipes import SwipeService
from nightswipe.services.users import ProfileService
from nightswipe.services.venues import VenueNormalizer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_verifier: IdentityVerifier
    session_service: SessionService
    deck_service: DeckService
    swipe_service: SwipeService
    match_service: MatchService
    confirmation_service: ConfirmationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    deck_repository = SupabaseDeckRepository(supabase_client)
    swipe_repository = SupabaseSwipeRepository(supabase_client)
    confirmation_repository = SupabaseConfirmationRepository(supabase_client)
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    places_client = HttpxPlacesClient.create(
        api_key=resolved_settings.google_places_api_key,
        base_url=resolved_settings.places_base_url,
    )

    session_service = SessionService(
        session_repository=session_repository,
        confirmation_repository=confirmation_repository,
        profile_service=profile_service,
        join_url_base=resolved_settings.join_url_base,
    )
    deck_service = DeckService(
        session_service=session_service,
        deck_repository=deck_repository,
        places_client=places_client,
        normalizer=VenueNormalizer(
            api_key=resolved_settings.google_places_api_key,
            photo_base_url=resolved_settings.places_photo_url,
        ),
        primary_radius_m=resolved_settings.deck_primary_radius_m,
        fallback_radius_m=resolved_settings.deck_fallback_radius_m,
        min_results=resolved_settings.deck_min_results,
        max_places=resolved_settings.deck_max_places,
        type_filter=resolved_settings.deck_type_filter,
    )
    swipe_service = SwipeService(
        session_service=session_service,
        deck_repository=deck_repository,
        swipe_repository=swipe_repository,
    )
    match_service = MatchService(
        session_service=session_service,
        deck_repository=deck_repository,
        swipe_repository=swipe_repository,
        profile_service=profile_service,
    )
    confirmation_service = ConfirmationService(
        session_service=session_service,
        deck_service=deck_service,
        confirmation_repository=confirmation_repository,
    )

    async def close_resources() -> None:
        await places_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_verifier=SupabaseIdentityVerifier(supabase_client),
        session_service=session_service,
        deck_service=deck_service,
        swipe_service=swipe_service,
        match_service=match_service,
        confirmation_service=confirmation_service,
        close_resources=close_resources,
    )
