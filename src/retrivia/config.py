"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    storage_bucket: str = "photostrips"
    sessions_table: str = "sessions"
    timezone: str = "UTC"
    front_camera_index: int = 0
    back_camera_index: int = 1
    camera_indices: str | None = None
    composite_scale: int = 2
    frame_quality: int = 90
    composite_quality: int = 95
    oauth_provider: str = "google"
    site_url: str = "http://localhost:8000"
    gallery_page_size: int = 100
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def resolved_camera_indices(self) -> tuple[int, int]:
        """Return the (front, back) camera device indices."""
        override = parse_camera_indices(self.camera_indices)
        if override is not None:
            return override
        return self.front_camera_index, self.back_camera_index


def parse_camera_indices(raw: str | None) -> tuple[int, int] | None:
    """Parse a ``front,back`` camera index override from env."""
    if raw is None:
        return None
    chunks = [chunk.strip() for chunk in raw.split(",")]
    if len(chunks) != 2 or not all(chunk.isdigit() for chunk in chunks):
        return None
    return int(chunks[0]), int(chunks[1])
