"""User settings persisted as a small YAML file.

The search core only reads search_folders; the remaining fields belong to
the launcher UI and are carried through unchanged.
"""

import copy
import logging
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


def default_search_folders(home: Path | None = None) -> list[str]:
    home = home or Path.home()
    return [str(home / "Desktop"), str(home / "Documents"), str(home / "Downloads")]


@dataclass
class AppSettings:
    """Launcher preferences."""

    hotkey: str = "CommandOrControl+Space"
    max_results: int = 8
    launch_at_login: bool = False
    theme: str = "dark"
    show_recent_apps: bool = True
    search_folders: list[str] = field(default_factory=default_search_folders)

    def to_dict(self) -> dict:
        return asdict(self)


_FIELD_TYPES = {
    "hotkey": str,
    "max_results": int,
    "launch_at_login": bool,
    "theme": str,
    "show_recent_apps": bool,
    "search_folders": list,
}


def _validate(key: str, value: object) -> str | None:
    """Return an error message if value does not fit field key."""
    expected = _FIELD_TYPES.get(key)
    if expected is None:
        return f"Unknown setting: {key}"
    # bool is a subclass of int; keep them apart
    if expected is int and isinstance(value, bool):
        return f"Setting {key} must be int"
    if not isinstance(value, expected):
        return f"Setting {key} must be {expected.__name__}"
    if key == "search_folders" and not all(isinstance(item, str) for item in value):
        return "Setting search_folders must be a list of strings"
    return None


def settings_from_mapping(raw: dict, home: Path | None = None) -> AppSettings:
    """Build settings from a parsed mapping, ignoring unknown or invalid keys."""
    settings = AppSettings(search_folders=default_search_folders(home))
    for key, value in raw.items():
        error = _validate(key, value)
        if error:
            logger.debug("Ignoring setting %s: %s", key, error)
            continue
        setattr(settings, key, list(value) if key == "search_folders" else value)
    return settings


class SettingsStore:
    """
    Lock-guarded settings with YAML persistence.

    Readers get a copy; save() swaps the in-memory value only after the file
    was written.
    """

    def __init__(self, path: Path, home: Path | None = None):
        self.path = path
        self._home = home
        self._lock = threading.Lock()
        self._settings = AppSettings(search_folders=default_search_folders(home))

    def load(self) -> AppSettings:
        """Read settings from disk, falling back to defaults."""
        settings = AppSettings(search_folders=default_search_folders(self._home))
        if self.path.exists():
            try:
                raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
                if isinstance(raw, dict):
                    settings = settings_from_mapping(raw, self._home)
                elif raw is not None:
                    logger.warning("Settings file %s is not a mapping, using defaults", self.path)
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Could not read settings from %s: %s", self.path, e)

        with self._lock:
            self._settings = settings
        return copy.deepcopy(settings)

    def get(self) -> AppSettings:
        with self._lock:
            return copy.deepcopy(self._settings)

    def search_folders(self) -> list[str]:
        with self._lock:
            return list(self._settings.search_folders)

    def save(self, settings: AppSettings) -> str | None:
        """Write settings to disk and make them current.

        Returns:
            None on success, otherwise an error message.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(settings.to_dict(), sort_keys=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self.path, e)
            return f"Failed to save settings: {e}"

        with self._lock:
            self._settings = copy.deepcopy(settings)
        return None

    def update(self, **changes) -> str | None:
        """Validate and apply field changes, then save."""
        for key, value in changes.items():
            error = _validate(key, value)
            if error:
                return error

        settings = self.get()
        for key, value in changes.items():
            setattr(settings, key, list(value) if key == "search_folders" else value)
        return self.save(settings)