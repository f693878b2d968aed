from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 8000
    APP_ENV: Literal["development", "production"] = "production"
    LOG_LEVEL: str = "INFO"

    # redis://... for Redis, memory:// for the in-process store
    STORE_URL: str = "redis://redis:6379/0"
    REDIS_KEY_PREFIX: str = "codescore:"
    REDIS_MAX_CONNECTIONS: int = 20

    PLATFORM_REQUEST_TIMEOUT_SECONDS: float = 10.0
    PLATFORM_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Max requests per platform within RATE_LIMIT_WINDOW_SECONDS, bulk refresh only.
    # Platforms missing from the mapping are not throttled.
    PLATFORM_RATE_LIMITS: dict[str, int] = {"leetcode": 20}
    RATE_LIMIT_WINDOW_SECONDS: float = 60.0

    AGGREGATION_CONCURRENCY: int = 10
    AGGREGATION_TIMEOUT_SECONDS: float = 15.0
    AUTO_RECOMPUTE_SCORES: bool = True
    SCORE_RECOMPUTE_INTERVAL_SECONDS: int = 21600  # 6 hours


settings = Settings()
