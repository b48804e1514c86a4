"""
Application configuration.

Loads settings from environment variables (and `.env`) with sensible defaults.
The JWT secrets have no defaults: the app refuses to start without them.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from taskify.core.utils import parse_duration


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # ==========================================================================
    # Authentication
    # ==========================================================================

    jwt_secret: str = Field(min_length=32)
    jwt_refresh_secret: str = Field(min_length=32)
    jwt_algorithm: str = "HS256"
    jwt_access_expires: str = "15m"
    jwt_refresh_expires: str = "7d"

    # ==========================================================================
    # Cache (empty REDIS_URL = in-process cache)
    # ==========================================================================

    redis_url: str = ""
    cache_ttl_seconds: int = 300

    # ==========================================================================
    # File uploads
    # ==========================================================================

    content_dir: str = "./data/content"
    content_base_url: str = "/content"
    max_upload_files: int = 5
    max_upload_size_mb: int = 10

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("jwt_access_expires", "jwt_refresh_expires")
    @classmethod
    def _check_duration(cls, value: str) -> str:
        parse_duration(value)
        return value

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def access_ttl_seconds(self) -> int:
        return parse_duration(self.jwt_access_expires)

    @property
    def refresh_ttl_seconds(self) -> int:
        return parse_duration(self.jwt_refresh_expires)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Set up root logging once at startup."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
