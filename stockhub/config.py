"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All deployment-specific values come from environment variables or .env
    - get_settings() is cached (lru_cache) — single instance per process
    - live_threshold is the one place the live-in-market minimum is configured

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults work out-of-the-box: a local SQLite file, schema auto-created on startup
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stockhub.core.domain_types import LIVE_THRESHOLD


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite:///./stockhub.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgres:// which SQLAlchemy no longer accepts."""
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_echo: bool = False
    auto_create_schema: bool = True

    # Domain
    live_threshold: int = Field(default=LIVE_THRESHOLD, ge=1)

    # Notifications
    event_queue_size: int = Field(default=100, ge=1)
    event_keepalive_seconds: float = Field(default=15.0, gt=0)

    # Service identity (health probe, OpenAPI)
    service_name: str = "stockhub-api"
    service_version: str = "1.0.0"

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
