"""
Configuration and settings for the personal space backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="PERSONAL_SPACE_USE_IN_MEMORY_BACKENDS"
    )

    # Shared secret for mutation routes
    admin_password: Optional[str] = Field(default=None, alias="ADMIN_PASSWORD")

    # Values written when the profile row is created lazily
    default_profile_name: str = Field(
        default="Ahmed Gamal", alias="DEFAULT_PROFILE_NAME"
    )
    default_profile_bio: str = Field(
        default="Welcome to my space", alias="DEFAULT_PROFILE_BIO"
    )

    # Frontend
    static_dir: str = Field(default="Public", alias="STATIC_DIR")

    # Base64 assets travel inside JSON bodies, so keep this generous.
    max_body_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_BODY_BYTES")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url) or self.use_in_memory_backends


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
