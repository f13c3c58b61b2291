"""
Configuration management for ScoreDB.

Uses pydantic-settings for environment variable binding.
All settings can be overridden via environment variables with SCOREDB_ prefix.
"""

import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable binding."""

    model_config = SettingsConfigDict(
        env_prefix="SCOREDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================
    # Data Storage
    # ==========================================
    data_dir: Path = Path.home() / ".scoredb"
    """Root directory for the durable backing store."""

    backend: Literal["sqlite", "memory"] = "sqlite"
    """Backing store used by create_context() when none is passed."""

    # ==========================================
    # Host Limits
    # ==========================================
    max_collection_name_length: int = 16
    """Longest collection (objective) name the host accepts."""

    max_entry_length: int = 32767
    """Longest serialized record the host accepts, in characters."""

    # ==========================================
    # Schema Layer
    # ==========================================
    schema_collection: str = "db_schemas"
    """Collection where schema metadata is recorded."""

    # ==========================================
    # Logging
    # ==========================================
    log_level: str = "INFO"
    log_file: Path | None = None

    # ==========================================
    # Computed Properties
    # ==========================================
    @property
    def db_path(self) -> Path:
        return self.data_dir / "scoreboard.sqlite"

    def ensure_directories(self) -> None:
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    log_level = level or settings.log_level

    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
    ]

    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(f"scoredb.{name}")
