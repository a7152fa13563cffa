"""Runtime settings, read from the environment and an optional `.env` file."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All knobs for the API, storage, auth and pricing."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "StayFinder"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "stayfinder"
    postgres_password: str = Field(default="stayfinder_secret")
    postgres_db: str = "stayfinder"
    database_dsn: Optional[str] = None  # full URL override, e.g. sqlite+aiosqlite:///./dev.db
    db_pool_size: int = 20
    db_max_overflow: int = 10

    @computed_field
    @property
    def database_url(self) -> str:
        """Async database connection URL."""
        if self.database_dsn:
            return self.database_dsn
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Rate Limiting (per IP)
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    # JWT Authentication
    jwt_secret_key: str = Field(default="your-super-secret-key-change-in-production")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Pricing
    default_currency: str = "USD"
    service_fee_rate: Decimal = Decimal("0.14")
    tax_rate: Decimal = Decimal("0.08")

    # Slow request threshold for request logging (seconds)
    slow_request_seconds: float = 1.0


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process."""
    return Settings()


settings = get_settings()
