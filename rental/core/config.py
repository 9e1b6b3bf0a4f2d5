"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables. Point `ENV_FILE` at a
local env file to load it as well (development only).
"""

from __future__ import annotations

import os
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


# Options SQLAlchemy accepts on create_engine() but drivers reject on connect().
_ENGINE_ONLY_QUERY_OPTIONS = frozenset(
    {"pool_size", "max_overflow", "pool_timeout", "pool_recycle", "pool_pre_ping", "echo"}
)


def _strip_engine_options(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in _ENGINE_ONLY_QUERY_OPTIONS
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with support
    for .env files in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "bicycle-rental"
    app_log_level: str = "INFO"

    # Observability
    observability_structured_logs: bool = True

    # Database
    database_url: str = "sqlite:///./rental.db"

    # Connection pool (ignored for SQLite, which does not pool here)
    db_pool_size: int = 20
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Rows per page for paged listings
    default_page_size: int = Field(default=7, ge=1)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def async_url(self) -> str:
        """Database URL rewritten for the async driver (asyncpg / aiosqlite)."""
        url = _strip_engine_options(self.database_url)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql+psycopg://"):
            return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set")
        return v.strip()

    @model_validator(mode="after")
    def validate_production_settings(self) -> Settings:
        """Reject configurations that must never reach production."""
        if self.app_env == AppEnvironment.PROD:
            if self.is_sqlite:
                raise ValueError("DATABASE_URL must point at PostgreSQL in production")
            if self.db_echo:
                raise ValueError("DB_ECHO must be disabled in production")

        return self


settings = Settings()
