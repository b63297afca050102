"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    google_places_api_key: str
    places_base_url: str = "https://maps.googleapis.com/maps/api/place"
    places_photo_url: str = "https://maps.googleapis.com/maps/api/place/photo"
    join_url_base: str = "https://nightswipe.app/join"
    deck_primary_radius_m: int = 5000
    deck_fallback_radius_m: int = 10000
    deck_min_results: int = 20
    deck_max_places: int = 25
    deck_type_filter: str = "restaurant|bar|night_club|cafe"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
