"""
Configuration settings for flashdeck.

Uses Pydantic Settings for environment variable management with .env file support.
Variables are read with the ``FLASHDECK_`` prefix, e.g. ``FLASHDECK_DATABASE_URL``.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Record store
    # ========================================
    database_url: str = Field(
        default="sqlite:///flashdeck.db",
        description="SQLAlchemy connection string for the reference record store",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum level written to stderr",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file (rotated at 10 MB)",
    )

    # ========================================
    # Study defaults
    # ========================================
    default_user_id: str = Field(
        default="local",
        description="Opaque learner id used when no identity provider is wired in",
    )
    default_strategy: Literal["uniform", "weighted"] = Field(
        default="weighted",
        description="Queue bias strategy used when none is requested",
    )
    import_delimiter: str = Field(
        default="|",
        description="Default front/back delimiter for text import",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
