"""Configuration management"""
from pathlib import Path
from typing import Literal, Optional

import pytz
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from expense_gamification.constants import PROFILE_STORAGE_KEY

load_dotenv()


class Settings(BaseSettings):
    """
    Gamification engine settings.

    Read from environment variables prefixed with GAMIFICATION_
    (e.g. GAMIFICATION_STORAGE_BACKEND=redis) or from a .env file.
    """
    model_config = SettingsConfigDict(
        env_prefix="GAMIFICATION_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    storage_backend: Literal["memory", "file", "redis"] = "file"
    data_path: Path = Path("./data")
    redis_url: Optional[str] = None
    profile_storage_key: str = Field(default=PROFILE_STORAGE_KEY, min_length=1)
    storage_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    # Calendar day boundaries for streaks are taken in this zone
    timezone: str = "UTC"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure valid IANA timezone"""
        try:
            pytz.timezone(v)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(
                f"Invalid timezone: '{v}'. "
                f"Use IANA timezone (e.g., 'Europe/Stockholm', 'America/New_York')"
            )
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v


def get_settings() -> Settings:
    """Load settings from the environment"""
    return Settings()
