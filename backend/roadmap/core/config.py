"""
Application configuration using Pydantic Settings.

Values are read from environment variables and an optional .env file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./roadmap.db"

    # ===========================================
    # Calendar
    # ===========================================
    # IANA timezone used to decide what "today" is for target dates
    APP_TIMEZONE: str = "UTC"

    # ===========================================
    # Milestone progress
    # ===========================================
    # Ascending completion percentages that trigger a one-off alert
    MILESTONE_PROGRESS_THRESHOLDS: List[int] = Field(default=[25, 50, 75, 100])

    # A milestone at or beyond this many days behind schedule is flagged at risk
    MILESTONE_RISK_BEHIND_SCHEDULE_DAYS: int = 3

    # ===========================================
    # Scheduler
    # ===========================================
    PROGRESS_RECOMPUTE_INTERVAL_MINUTES: int = 60


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
