# core/config.py
"""
Runtime settings for the portal sync service.

Every field can be overridden through the environment (or a ``.env`` file);
the upstream base URLs in particular are expected to change per deployment.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------
    PROJECT_NAME: str = "VSAU Portal Sync"
    DEBUG: bool = False
    PORT: int = 8000
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"
    ALLOWED_HOSTS: List[str] = ["*"]

    # ------------------------------------------------------------------
    # Outbound HTTP
    # ------------------------------------------------------------------
    DEFAULT_USER_AGENT: str = "Mozilla/5.0"
    TIMEOUT: float = 30.0
    CONCURRENT_SCRAPES: int = 5
    FETCH_RETRIES: int = 3
    NEWS_PAGES: int = 1

    # ------------------------------------------------------------------
    # Upstream pages
    # ------------------------------------------------------------------
    NEWS_BASE_URL: str = "https://vsau.org/novini?page=1"
    RECTORAT_BASE_URL: str = "https://vsau.org/pro-universitet/rektorat"
    CENTERS_BASE_URL: str = "https://vsau.org/pro-universitet/strukturni-pidrozdili"
    SOURCES_CONFIG_PATH: Path = PROJECT_ROOT / "configs" / "sources.yaml"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    DATABASE_URL: str = "sqlite:///data/app.db"
    UPLOADS_PREFIX: str = "/uploads"
    DEFAULT_IMAGE: str = "/img/default_avatar.jpg"

    # ------------------------------------------------------------------
    # Scheduling & caching
    # ------------------------------------------------------------------
    SYNC_INTERVAL_MINUTES: int = 60
    CACHE_TTL_SECONDS: int = 300
    CACHE_MAX_ENTRIES: int = 100

    @field_validator("CONCURRENT_SCRAPES", "CACHE_MAX_ENTRIES", "FETCH_RETRIES", "NEWS_PAGES")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    @field_validator("SYNC_INTERVAL_MINUTES")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        # 0 turns the background scheduler off
        if v < 0:
            raise ValueError("SYNC_INTERVAL_MINUTES must be >= 0")
        return v


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance shared by the app and the CLI."""
    return Settings()


settings = get_settings()
