"""Tests for runtime settings loaded from the environment."""

import os
from pathlib import Path

import pytest

from calstat.config.settings import Settings, get_settings, load_env_file, load_settings, parse_bool
from calstat.core.errors import ConfigurationError
from calstat.core.time_units import TimeUnit


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Clean environment variables before each test."""
    original_env = os.environ.copy()

    for var in [k for k in os.environ if k.startswith("CALSTAT_")]:
        del os.environ[var]

    # Keep a stray .env in the working directory out of the way
    monkeypatch.chdir(tmp_path)

    import calstat.config.settings as settings_module

    settings_module._settings = None

    yield

    os.environ.clear()
    os.environ.update(original_env)
    settings_module._settings = None


def test_settings_defaults():
    """Test default settings."""
    settings = Settings()

    assert settings.log_level == "WARNING"
    assert settings.log_dir is None
    assert settings.log_json is False
    assert settings.default_unit is TimeUnit.DAY
    assert settings.truncate_subsecond is False


def test_settings_normalizes_values():
    """Test string values are coerced."""
    settings = Settings(log_level="debug", log_dir="/tmp/logs", default_unit="weekOfMonth")

    assert settings.log_level == "DEBUG"
    assert settings.log_dir == Path("/tmp/logs")
    assert settings.default_unit is TimeUnit.WEEK_OF_MONTH


def test_settings_invalid_log_level():
    """Test invalid log level produces a clear error."""
    with pytest.raises(ConfigurationError, match="CALSTAT_LOG_LEVEL"):
        Settings(log_level="LOUD")


def test_settings_invalid_unit():
    """Test invalid default unit produces a clear error."""
    with pytest.raises(ConfigurationError, match="CALSTAT_DEFAULT_UNIT"):
        Settings(default_unit="fortnight")


def test_from_env(monkeypatch):
    """Test loading settings from environment variables."""
    monkeypatch.setenv("CALSTAT_LOG_LEVEL", "INFO")
    monkeypatch.setenv("CALSTAT_LOG_JSON", "yes")
    monkeypatch.setenv("CALSTAT_DEFAULT_UNIT", "month")
    monkeypatch.setenv("CALSTAT_TRUNCATE_SUBSECOND", "1")

    settings = Settings.from_env()

    assert settings.log_level == "INFO"
    assert settings.log_json is True
    assert settings.default_unit is TimeUnit.MONTH
    assert settings.truncate_subsecond is True


def test_from_env_invalid_bool(monkeypatch):
    """Test unparsable flags are reported as configuration errors."""
    monkeypatch.setenv("CALSTAT_LOG_JSON", "maybe")

    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        Settings.from_env()


def test_load_env_file(tmp_path):
    """Test loading .env file."""
    env_file = tmp_path / "custom.env"
    env_file.write_text(
        """
# comment
CALSTAT_LOG_LEVEL=DEBUG
CALSTAT_DEFAULT_UNIT="hour"
"""
    )

    load_env_file(env_file)

    assert os.environ["CALSTAT_LOG_LEVEL"] == "DEBUG"
    assert os.environ["CALSTAT_DEFAULT_UNIT"] == "hour"


def test_env_file_does_not_override_environment(tmp_path, monkeypatch):
    """Test variables already set win over the .env file."""
    monkeypatch.setenv("CALSTAT_LOG_LEVEL", "ERROR")
    env_file = tmp_path / ".env"
    env_file.write_text("CALSTAT_LOG_LEVEL=DEBUG\n")

    settings = Settings.from_env(env_file)

    assert settings.log_level == "ERROR"


def test_default_env_file_in_working_directory(tmp_path):
    """Test .env in the current directory is picked up."""
    (tmp_path / ".env").write_text("CALSTAT_DEFAULT_UNIT=quarter\n")

    settings = Settings.from_env()

    assert settings.default_unit is TimeUnit.QUARTER


def test_get_settings_caches():
    """Test settings are loaded once and cached."""
    first = get_settings()

    assert get_settings() is first
    assert load_settings() is not first


@pytest.mark.parametrize(("value", "expected"), [("true", True), ("On", True), ("0", False), ("", False)])
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected
