"""Centralized configuration for ledgerlens.

Loads configuration from an optional .env file plus the process environment
and provides typed access to settings. Missing or invalid values produce
clear ``ConfigError`` messages.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import pytz

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
]

ENV_PREFIX = "LEDGERLENS_"


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class Settings:
    """Settings shared by the query engine, rollups and CLI.

    Attributes
    ----------
    default_timezone : str | None
        Timezone used for calendar comparisons (None = local wall clock)
    page_size : int
        Default page size for pagination
    max_visible_pages : int
        Page-number window width before ellipses kick in
    week_start : int
        First day of the week for "week" windows (0=Monday, 6=Sunday)
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for JSON log files (console only if not set)
    """

    default_timezone: str | None = None
    page_size: int = 10
    max_visible_pages: int = 5
    week_start: int = 0

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        if self.default_timezone:
            try:
                pytz.timezone(self.default_timezone)
            except pytz.UnknownTimeZoneError as exc:
                raise ConfigError(
                    f"LEDGERLENS_DEFAULT_TZ is not a known timezone: {self.default_timezone!r}. "
                    "Use an IANA name such as Asia/Kolkata or Europe/Brussels"
                ) from exc

        if self.page_size < 1:
            raise ConfigError(f"LEDGERLENS_PAGE_SIZE must be at least 1, got {self.page_size}")

        if self.max_visible_pages < 5:
            raise ConfigError(
                f"LEDGERLENS_MAX_VISIBLE_PAGES must be at least 5, got {self.max_visible_pages}"
            )

        if not 0 <= self.week_start <= 6:
            raise ConfigError(f"LEDGERLENS_WEEK_START must be 0-6 (0=Monday), got {self.week_start}")

        self.log_level = self.log_level.upper()
        if self.log_level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigError(f"LEDGERLENS_LOG_LEVEL is not a log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, then reads os.environ.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)

        Raises
        ------
        ConfigError
            If settings are invalid
        """
        if env_file is None:
            env_file = Path(".env")

        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            load_env_file(env_file)

        try:
            return cls(
                default_timezone=os.environ.get(f"{ENV_PREFIX}DEFAULT_TZ") or None,
                page_size=int(os.environ.get(f"{ENV_PREFIX}PAGE_SIZE", "10")),
                max_visible_pages=int(os.environ.get(f"{ENV_PREFIX}MAX_VISIBLE_PAGES", "5")),
                week_start=int(os.environ.get(f"{ENV_PREFIX}WEEK_START", "0")),
                log_level=os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
                log_dir=Path(os.environ[f"{ENV_PREFIX}LOG_DIR"]) if f"{ENV_PREFIX}LOG_DIR" in os.environ else None,
            )

        except ValueError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Existing environment variables win over values from the file.
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                # Remove quotes
                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]

                os.environ.setdefault(key, value)


# Global settings instance
_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings from environment and keep them as the current settings."""
    global _settings
    _settings = Settings.from_env(env_file)
    return _settings


def get_settings() -> Settings:
    """Get current settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def generate_example_env(output_path: Path | None = None) -> str:
    """Generate example .env file with all settings.

    Parameters
    ----------
    output_path
        Optional path to write .env file

    Returns
    -------
    str
        Example .env contents
    """
    example = """# ledgerlens configuration
# Copy this to .env and adjust values

# Timezone for calendar comparisons (optional, default: local wall clock)
# Examples: Asia/Kolkata, America/New_York, Europe/Brussels
# LEDGERLENS_DEFAULT_TZ=Asia/Kolkata

# Default rows per page (optional, default: 10)
LEDGERLENS_PAGE_SIZE=10

# Page numbers shown before ellipses are used (optional, default: 5)
LEDGERLENS_MAX_VISIBLE_PAGES=5

# First day of week for "week" rollups: 0=Monday ... 6=Sunday (optional, default: 0)
LEDGERLENS_WEEK_START=0

# Log level (optional, default: INFO)
# Options: DEBUG, INFO, WARNING, ERROR, CRITICAL
LEDGERLENS_LOG_LEVEL=INFO

# Directory for JSON log files (optional, console only if not set)
# LEDGERLENS_LOG_DIR=logs
"""

    if output_path:
        output_path.write_text(example)

    return example
