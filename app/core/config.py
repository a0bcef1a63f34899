"""
Application configuration using pydantic-settings.
All environment variables are loaded from .env file with sensible defaults.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Baartal B-Coin Ledger"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Database (SQLite for local dev, any SQLAlchemy URL in production)
    DATABASE_URL: str = "sqlite:///./baartal.db"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = False  # Disable by default for easy local dev

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Auth
    JWT_SECRET: str = "baartal-dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    BCRYPT_ROUNDS: int = 12

    # B-Coin economics
    DEFAULT_BCOIN_RATE: Decimal = Decimal("5.00")
    MAX_BCOIN_RATE: Decimal = Decimal("20.00")
    RATING_BONUS_HIGH: Decimal = Decimal("10.00")  # 4-5 stars
    RATING_BONUS_LOW: Decimal = Decimal("5.00")

    # Caching / locking
    ANALYTICS_CACHE_TTL: int = 300
    LOCK_TIMEOUT_SECONDS: int = 10

    # Startup
    SEED_DEMO_DATA: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance to avoid re-reading .env on every call."""
    return Settings()
