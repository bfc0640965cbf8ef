"""Configuration module for genieMCP.

Loads configuration from environment variables with sensible defaults.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

APP_DIR_NAME = "spotlight-genie"


def default_config_dir() -> Path:
    """Per-user configuration directory for the current platform."""
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    if sys.platform == "win32":
        appdata = os.getenv("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    xdg = os.getenv("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def _positive_float(name: str, raw: str, allow_zero: bool = False) -> float:
    try:
        value = float(raw)
        if value < 0 or (value == 0 and not allow_zero):
            bound = ">= 0" if allow_zero else "> 0"
            raise ValueError(f"Value must be {bound}, got {value:g}")
    except ValueError as e:
        raise ValueError(f"Invalid {name} value '{raw}': {e}") from e
    return value


@dataclass
class Config:
    """Application configuration."""

    settings_path: Path
    home: Path
    port: int
    app_cooldown: float
    index_ttl: float
    warm_interval: float

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        default_settings = str(default_config_dir() / APP_DIR_NAME / "settings.yaml")
        settings_path = Path(os.getenv("GENIE_SETTINGS", default_settings)).expanduser()

        home = Path(os.getenv("GENIE_HOME", str(Path.home()))).expanduser()

        port_str = os.getenv("GENIE_PORT", "8080")
        try:
            port = int(port_str)
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        except ValueError as e:
            raise ValueError(f"Invalid GENIE_PORT value '{port_str}': {e}") from e

        app_cooldown = _positive_float("GENIE_APP_COOLDOWN", os.getenv("GENIE_APP_COOLDOWN", "20"))
        index_ttl = _positive_float("GENIE_INDEX_TTL", os.getenv("GENIE_INDEX_TTL", "300"))

        # 0 disables the background warm-up thread
        warm_interval = _positive_float(
            "GENIE_WARM_INTERVAL", os.getenv("GENIE_WARM_INTERVAL", "0"), allow_zero=True
        )

        return cls(
            settings_path=settings_path,
            home=home,
            port=port,
            app_cooldown=app_cooldown,
            index_ttl=index_ttl,
            warm_interval=warm_interval,
        )


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
