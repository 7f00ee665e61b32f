"""
Centralized engine configuration.
"""
import logging
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # App
    app_name: str = "Campaign Engine"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./campaign_engine.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_pre_ping: bool = True

    # Transaction bounds (PostgreSQL only, 0 disables)
    transaction_timeout_ms: int = 30000
    lease_lock_timeout_ms: int = 5000

    # Campaign defaults
    default_campaign_priority: int = 5
    default_wrap_up_time: int = 15

    # Deduplication
    dedup_key_separator: str = "||"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Return the cached engine settings."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Configure root logging for hosts embedding the engine."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
