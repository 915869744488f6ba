"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Tank01Config(BaseSettings):
    """Tank01 NFL API (RapidAPI) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RAPID_API_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    key: str = Field(..., description="RapidAPI key")
    host: str = Field(
        default="tank01-nfl-live-in-game-real-time-statistics-nfl.p.rapidapi.com",
        description="RapidAPI host header value",
    )
    base_url: str = Field(
        default="https://tank01-nfl-live-in-game-real-time-statistics-nfl.p.rapidapi.com",
        description="Base URL for the Tank01 NFL API",
    )
    timeout_seconds: float = Field(default=30.0, description="Per-request timeout (seconds)")


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    url: str = Field(..., description="Async SQLAlchemy connection URL")
    pool_size: int = Field(default=5, description="Database connection pool size")


class SyncConfig(BaseSettings):
    """Schedule, odds and grading sync parameters."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    preferred_sportsbooks: list[str] = Field(
        default=[
            "bet365",
            "fanduel",
            "draftkings",
            "caesars_sportsbook",
            "betmgm",
        ],
        description="Sportsbooks to take odds from, in priority order",
    )
    season_weeks: int = Field(default=18, ge=1, le=18, description="Regular season weeks")
    season_type: str = Field(default="reg", description="Tank01 season type for schedules")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    level: str = Field(default="INFO", description="Logging level")
    file: str = Field(default="logs/pickem.log", description="Log file path")


class Settings(BaseSettings):
    """
    Composed application settings loaded from environment variables.

    Example usage:
        settings = get_settings()
        api_key = settings.tank01.key
        db_url = settings.database.url
        sportsbooks = settings.sync.preferred_sportsbooks
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    tank01: Tank01Config = Field(default_factory=Tank01Config)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings; primarily for testing overrides."""
    get_settings.cache_clear()
