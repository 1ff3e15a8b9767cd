"""Runtime settings.

Loads configuration from the environment and an optional .env file and
provides typed access to it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..core.errors import ConfigurationError
from ..core.time_units import TimeUnit

__all__ = [
    "LOG_LEVELS",
    "Settings",
    "get_settings",
    "load_env_file",
    "load_settings",
]

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass
class Settings:
    """Settings for calstat.

    Attributes
    ----------
    log_level : str
        Minimum loguru level
    log_dir : Path | None
        Directory for JSONL log files (none when unset)
    log_json : bool
        Serialize console records as JSON
    default_unit : TimeUnit
        Unit used by the CLI when ``--unit`` is omitted
    truncate_subsecond : bool
        Default for bucket-end truncation
    """

    log_level: str = "WARNING"
    log_dir: Path | None = None
    log_json: bool = False
    default_unit: TimeUnit = TimeUnit.DAY
    truncate_subsecond: bool = False

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"CALSTAT_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )

        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        try:
            self.default_unit = TimeUnit.coerce(self.default_unit)
        except ValueError as exc:
            raise ConfigurationError(f"CALSTAT_DEFAULT_UNIT is invalid: {exc}") from exc

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from the environment.

        Values in ``env_file`` are loaded into ``os.environ`` first.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)

        Raises
        ------
        ConfigurationError
            If a value cannot be parsed
        """
        if env_file is None:
            env_file = Path(".env")
        if isinstance(env_file, str):
            env_file = Path(env_file)
        if env_file.exists():
            load_env_file(env_file)

        try:
            return cls(
                log_level=os.environ.get("CALSTAT_LOG_LEVEL", "WARNING"),
                log_dir=Path(os.environ["CALSTAT_LOG_DIR"]) if os.environ.get("CALSTAT_LOG_DIR") else None,
                log_json=parse_bool(os.environ.get("CALSTAT_LOG_JSON", "false")),
                default_unit=os.environ.get("CALSTAT_DEFAULT_UNIT", TimeUnit.DAY.code),
                truncate_subsecond=parse_bool(os.environ.get("CALSTAT_TRUNCATE_SUBSECOND", "false")),
            )
        except (ValueError, KeyError) as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def parse_bool(value: str) -> bool:
    """Parse a boolean flag (true/false, yes/no, on/off, 1/0)."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def load_env_file(env_file: Path) -> None:
    """Load ``KEY=VALUE`` lines from ``env_file`` into ``os.environ``.

    Variables already set in the environment are not overridden.
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()
            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                value = value[1:-1]

            os.environ.setdefault(key, value)


_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings and cache them process-wide."""
    global _settings
    _settings = Settings.from_env(env_file)
    return _settings


def get_settings() -> Settings:
    """Return cached settings, loading them on first use."""
    if _settings is None:
        return load_settings()
    return _settings
