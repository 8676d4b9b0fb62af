"""Runtime configuration for JSON:API rendering."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class JSONAPISettings(BaseSettings):
    """Settings read from ``JSONAPI_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="JSONAPI_", extra="ignore")

    version: str = "1.0"
    base_url: str | None = None
    default_page_limit: int = Field(default=10, ge=1)
    log_level: str = "WARNING"


@lru_cache(maxsize=1)
def get_settings() -> JSONAPISettings:
    """Return the process-wide settings instance."""
    return JSONAPISettings()
