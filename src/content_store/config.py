"""Configuration management using pydantic-settings."""

import logging
from pathlib import Path
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from content_store.utils.logging import setup_logging


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Store behaviour
    default_category_name: str = Field(
        default="未分类", description="Display name of the fallback category"
    )
    default_source: str = Field(
        default="admin", description="Source recorded on posts when none is given"
    )
    strict_load: bool = Field(
        default=False,
        description="Fail on an unreadable storage file instead of resetting it",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Console log level")
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Paths
    data_dir: Path = Field(default=Path("./data"), description="Data directory path")

    @property
    def storage_file(self) -> Path:
        """Path to the JSON storage document."""
        return self.data_dir / "storage.json"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def configure_logging(self) -> logging.Logger:
        """Set up the package logger from the configured level and file."""
        return setup_logging(self.log_level.upper(), self.log_file)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
