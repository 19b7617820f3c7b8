"""Configuration management for Mail Folders.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the MAIL_FOLDERS_ prefix (e.g., MAIL_FOLDERS_SNAPSHOT_PATH).
    """

    model_config = SettingsConfigDict(
        env_prefix="MAIL_FOLDERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Snapshot Configuration
    snapshot_path: Path = Field(
        default=Path("mailbox.json"),
        description="Path to the JSON file holding the whole mailbox snapshot",
    )
    snapshot_indent: Optional[int] = Field(
        default=2,
        ge=0,
        description="JSON indentation for the snapshot file (None writes compact JSON)",
    )
    autosave: bool = Field(
        default=True,
        description="Save the snapshot after every mutating CLI command",
    )

    # Application Configuration
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
