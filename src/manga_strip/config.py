"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from manga_strip.domain.generation import ImageModel

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_image_model: ImageModel = ImageModel.DALL_E_2
    demo_delay_seconds: float = 2.0
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    state_path: Path = Path(".manga_strip/state.json")
    google_drive_access_token: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def ai_enabled(self) -> bool:
        """Return True when generator credentials are present."""
        return bool(self.openai_api_key and self.openai_api_key.strip())

    @property
    def uses_supabase(self) -> bool:
        """Return True when Supabase persistence is configured."""
        return bool(self.supabase_url and self.supabase_service_key)
