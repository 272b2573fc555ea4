"""
docpack Configuration

Settings are loaded from:
1. Environment variables (prefixed with DOCPACK_)
2. ~/.docpack/.env file

Key settings:
- DOCPACK_LOG_LEVEL: Logging level for the CLI and API (default: INFO)
- DOCPACK_MAX_ARCHIVE_BYTES: Largest archive accepted for decoding
- DOCPACK_JSON_INDENT: Indent used when re-encoding archive members
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """docpack configuration settings."""

    app_name: str = "docpack"

    log_level: str = Field(default="INFO", description="Root logging level")
    max_archive_bytes: int = Field(
        default=100 * 1024 * 1024, gt=0, description="Reject archives larger than this"
    )
    json_indent: int = Field(default=2, ge=0, description="Indent for re-encoded JSON members")

    # HTTP API
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    model_config = SettingsConfigDict(
        env_prefix="DOCPACK_",
        env_file=Path.home() / ".docpack" / ".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings."""
    return Settings()


def reload_settings() -> Settings:
    """Clear cached settings (useful for tests) and reload."""
    get_settings.cache_clear()
    return get_settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


__all__ = ["Settings", "get_settings", "reload_settings", "configure_logging", "LOG_FORMAT"]
