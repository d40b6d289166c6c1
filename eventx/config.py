"""Application settings loaded from ``EVENTX_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENTX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "EventX"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # IANA zone used for calendar-day filtering and conflict messages
    timezone: str = "UTC"

    min_event_minutes: int = Field(default=15, gt=0)

    session_cookie_name: str = "session"
    session_ttl_days: int = Field(default=7, gt=0)
    cookie_secure: bool = False
    password_iterations: int = Field(default=240_000, gt=0)


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
