"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "AlumniConnect Gamification"
    DEBUG: bool = False

    # Client-local storage (stands in for browser localStorage)
    LOCAL_STORAGE_PATH: str = ".alumniconnect-storage.json"
    SESSION_STORAGE_KEY: str = "currentUser"

    # Optional JSON file (list of member objects) loaded into the directory at startup
    MEMBER_SEED_PATH: str | None = None

    # Point schedule
    DAILY_LOGIN_POINTS: int = 5
    STREAK_BONUS_POINTS: int = 15
    STREAK_BONUS_THRESHOLD: int = 7
    EVENT_RSVP_POINTS: int = 30
    MENTORSHIP_REQUEST_POINTS: int = 25
    DONATION_UNIT: int = 100  # One point per this many currency units donated

    # "weekly": bonus when the streak reaches a multiple of the threshold
    # "daily": bonus every day the streak is at or above the threshold
    STREAK_BONUS_POLICY: Literal["weekly", "daily"] = "weekly"

    # Calendar used to decide whether two logins fall on consecutive days
    STREAK_TIMEZONE: str = "UTC"

    # Advance joined challenges automatically when a matching action is recorded
    AUTO_TRACK_CHALLENGES: bool = True

    # Feature Flags
    ENABLE_GAMIFICATION: bool = True

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @field_validator(
        "DAILY_LOGIN_POINTS",
        "STREAK_BONUS_POINTS",
        "EVENT_RSVP_POINTS",
        "MENTORSHIP_REQUEST_POINTS",
    )
    @classmethod
    def validate_non_negative(cls, v: int, info: Any) -> int:
        """Point awards are grants, never deductions."""
        if v < 0:
            raise ValueError(f"{info.field_name} must not be negative")
        return v

    @field_validator("STREAK_BONUS_THRESHOLD", "DONATION_UNIT")
    @classmethod
    def validate_positive(cls, v: int, info: Any) -> int:
        """Validate divisors and thresholds are usable."""
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v

    @field_validator("STREAK_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate the streak calendar names a known time zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
