from __future__ import annotations

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    BOT_TOKEN: str = ""
    DATABASE_URL: str = "sqlite+aiosqlite:///./habitglass.db"

    DEFAULT_TIMEZONE: str = "UTC"
    # Local hour for the "never miss twice" nudge
    REMINDER_HOUR: int = 20
    STREAK_SCAN_LIMIT_DAYS: int = 3650
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


settings = Settings()


def normalize_database_url(database_url: str) -> str:
    """Switches plain postgresql:// URLs to the asyncpg driver."""
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url
