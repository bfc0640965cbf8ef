"""Tests for config module."""

from pathlib import Path

import pytest

from genie_mcp.config import APP_DIR_NAME, Config, get_config, reset_config

GENIE_VARS = (
    "GENIE_SETTINGS",
    "GENIE_HOME",
    "GENIE_PORT",
    "GENIE_APP_COOLDOWN",
    "GENIE_INDEX_TTL",
    "GENIE_WARM_INTERVAL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without GENIE_* overrides."""
    for name in GENIE_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def test_config_defaults():
    """Test config loads with defaults when no env vars set."""
    config = Config.from_env()
    assert config.home == Path.home()
    assert config.port == 8080
    assert config.app_cooldown == 20
    assert config.index_ttl == 300
    assert config.warm_interval == 0
    assert config.settings_path.name == "settings.yaml"
    assert config.settings_path.parent.name == APP_DIR_NAME


def test_config_from_env(monkeypatch):
    """Test config loads from environment variables."""
    monkeypatch.setenv("GENIE_SETTINGS", "/custom/genie.yaml")
    monkeypatch.setenv("GENIE_HOME", "/custom/home")
    monkeypatch.setenv("GENIE_PORT", "9000")
    monkeypatch.setenv("GENIE_APP_COOLDOWN", "5")
    monkeypatch.setenv("GENIE_INDEX_TTL", "60")
    monkeypatch.setenv("GENIE_WARM_INTERVAL", "30")

    config = Config.from_env()
    assert config.settings_path == Path("/custom/genie.yaml")
    assert config.home == Path("/custom/home")
    assert config.port == 9000
    assert config.app_cooldown == 5
    assert config.index_ttl == 60
    assert config.warm_interval == 30


def test_config_from_env_creates_new_instances():
    """Test Config.from_env() creates new instances each time."""
    config1 = Config.from_env()
    config2 = Config.from_env()
    assert config1 is not config2


def test_get_config_is_cached():
    """Test get_config() returns the same instance until reset."""
    config = get_config()
    assert get_config() is config
    reset_config()
    assert get_config() is not config


def test_config_tilde_expansion(monkeypatch):
    """Test config expands tilde in paths."""
    monkeypatch.setenv("GENIE_SETTINGS", "~/genie/settings.yaml")
    config = Config.from_env()
    assert "~" not in str(config.settings_path)
    assert config.settings_path.is_absolute()


def test_config_invalid_port_non_numeric(monkeypatch):
    """Test config raises error for non-numeric port."""
    monkeypatch.setenv("GENIE_PORT", "not_a_number")
    with pytest.raises(ValueError, match="Invalid GENIE_PORT"):
        Config.from_env()


def test_config_invalid_port_out_of_range(monkeypatch):
    """Test config raises error for port out of valid range."""
    monkeypatch.setenv("GENIE_PORT", "70000")
    with pytest.raises(ValueError, match="Port must be between 1 and 65535"):
        Config.from_env()


@pytest.mark.parametrize("name", ["GENIE_APP_COOLDOWN", "GENIE_INDEX_TTL"])
def test_config_durations_must_be_positive(monkeypatch, name):
    """Test cooldown and TTL reject zero and negative values."""
    monkeypatch.setenv(name, "0")
    with pytest.raises(ValueError, match=f"Invalid {name}"):
        Config.from_env()
    monkeypatch.setenv(name, "-3")
    with pytest.raises(ValueError, match="Value must be > 0"):
        Config.from_env()


def test_config_duration_non_numeric(monkeypatch):
    """Test config raises error for non-numeric durations."""
    monkeypatch.setenv("GENIE_INDEX_TTL", "soon")
    with pytest.raises(ValueError, match="Invalid GENIE_INDEX_TTL"):
        Config.from_env()


def test_config_warm_interval_disabled(monkeypatch):
    """Test warm_interval can be set to 0 to disable."""
    monkeypatch.setenv("GENIE_WARM_INTERVAL", "0")
    assert Config.from_env().warm_interval == 0


def test_config_warm_interval_invalid_negative(monkeypatch):
    """Test config raises error for negative warm-up interval."""
    monkeypatch.setenv("GENIE_WARM_INTERVAL", "-5")
    with pytest.raises(ValueError, match="Value must be >= 0"):
        Config.from_env()
