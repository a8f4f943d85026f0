"""Configuration management for readpace.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_data_dir() -> Path:
    """Directory holding the database and log file."""
    data_home = os.environ.get("XDG_DATA_HOME", str(Path.home() / ".local" / "share"))
    return Path(data_home).expanduser() / "readpace"


@dataclass
class Config:
    """Application configuration."""

    # Storage
    db_path: Path

    # Logging
    log_path: Path
    log_level: str

    # Persistence retries
    persist_retry_max: int
    persist_retry_delay: float  # seconds

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path = Path(
            os.environ.get("READPACE_DB_PATH", str(default_data_dir() / "readpace.db"))
        ).expanduser()

        log_path_str = os.environ.get("READPACE_LOG_PATH")
        log_path = (
            Path(log_path_str).expanduser()
            if log_path_str
            else db_path.parent / "readpace.log"
        )

        return cls(
            db_path=db_path,
            log_path=log_path,
            log_level=os.environ.get("READPACE_LOG_LEVEL", "WARNING").upper(),
            persist_retry_max=int(os.environ.get("READPACE_PERSIST_RETRY_MAX", "3")),
            persist_retry_delay=float(
                os.environ.get("READPACE_PERSIST_RETRY_DELAY", "0.5")
            ),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        # Check database directory is writable
        if not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        if self.log_level not in LOG_LEVELS:
            errors.append(
                f"Unknown log level {self.log_level!r}, expected one of {', '.join(LOG_LEVELS)}"
            )

        if self.persist_retry_max < 1:
            errors.append("READPACE_PERSIST_RETRY_MAX must be at least 1")

        if self.persist_retry_delay < 0:
            errors.append("READPACE_PERSIST_RETRY_DELAY must not be negative")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
