"""Application configuration — environment-driven settings via pydantic-settings.

Every setting can be overridden with a ``STOREFRONT_``-prefixed
environment variable or a ``.env`` file.  ``get_settings()`` is cached,
so there is a single instance per process.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_", env_file=".env", case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite:///storefront.db"
    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_echo: bool = False

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// URLs; use the psycopg 3 driver."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    # Connection resilience
    database_connect_retries: int = 5
    database_retry_backoff_ms: int = 2000
    database_reconnect_interval_seconds: float = 30.0

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"


@lru_cache
def get_settings() -> Settings:
    return Settings()
