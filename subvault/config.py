"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Secrets come from environment variables; the defaults are for local development only
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - SQLite (aiosqlite) by default so the API runs without external services;
      postgresql:// URLs are rewritten for asyncpg
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/subvault.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_auto_create: bool = True

    # Auth
    jwt_secret: str = "subvault-dev-secret-change-in-production"
    token_ttl_hours: int = 24

    # Field encryption (credentials, AI API keys)
    encryption_key: str = "subvault-dev-encryption-key-change-in-production"

    environment: str = "development"

    # API
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # Rate limiting (per client IP, moving window)
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"
    rate_limit_unlock: str = "10/minute"

    # OpenAI-compatible provider
    ai_timeout_seconds: int = 120
    ai_max_retries: int = 2
    ai_base_delay_ms: int = 1000
    ai_max_delay_ms: int = 30_000
    ai_reply_language: str = "Simplified Chinese"
    chat_history_limit: int = 20
    report_history_limit: int = 10

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
