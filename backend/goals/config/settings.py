"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from goals.config import settings

    # Access settings
    db_url = settings.DATABASE_URL
    default_goal = settings.DEFAULT_GOAL_MINUTES
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Study Goals"
    DEBUG: bool = False

    # PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "studygoals"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "studygoals"

    # Full async URL; takes precedence over the POSTGRES_* parts when set
    DATABASE_URL_OVERRIDE: str = ""

    # Store still holding the pre-snapshot (legacy) data shape, if any
    LEGACY_DATABASE_URL: str = ""

    @property
    def DATABASE_URL(self) -> str:
        """Async connection URL for the current store."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Day boundaries are computed in this IANA zone; empty means host local time
    TIMEZONE: str = ""

    # Goals
    DEFAULT_GOAL_MINUTES: int = 60

    # Streaks
    STREAK_MILESTONES: list[int] = [3, 7, 14, 30, 60, 100, 365]

    # Reject mixed-day batches in daily aggregation (enable while debugging)
    STRICT_DAY_CHECKS: bool = False

    # Rolling window for topic summaries (today plus the previous days)
    WEEKLY_WINDOW_DAYS: int = 7

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
