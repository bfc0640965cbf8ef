"""Installed application discovery and the App Directory snapshot."""

import logging
import os
import sys
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from genie_mcp.search.models import AppEntry

logger = logging.getLogger(__name__)

DESKTOP_SCAN_DEPTH = 2

MACOS_APP_DIRS = (
    "/Applications",
    "/Applications/Utilities",
    "/System/Applications",
    "/System/Applications/Utilities",
)

MACOS_SETTINGS_PANES = (
    ("Wi-Fi", "com.apple.wifi-settings-extension"),
    ("Bluetooth", "com.apple.BluetoothSettings"),
    ("Network", "com.apple.Network-Settings.extension"),
    ("Sound", "com.apple.Sound-Settings.extension"),
    ("Display", "com.apple.Displays-Settings.extension"),
    ("Wallpaper", "com.apple.Wallpaper-Settings.extension"),
    ("Notifications", "com.apple.Notifications-Settings.extension"),
    ("Keyboard", "com.apple.Keyboard-Settings.extension"),
    ("Trackpad", "com.apple.Trackpad-Settings.extension"),
    ("Privacy & Security", "com.apple.settings.PrivacySecurity.extension"),
    ("General", "com.apple.General-Settings.extension"),
    ("Appearance", "com.apple.Appearance-Settings.extension"),
    ("Battery", "com.apple.Battery-Settings.extension"),
    ("Accessibility", "com.apple.Accessibility-Settings.extension"),
    ("Siri", "com.apple.Siri-Settings.extension"),
    ("Desktop & Dock", "com.apple.Desktop-Settings.extension"),
    ("Passwords", "com.apple.Passwords-Settings.extension"),
)

MACOS_SETTINGS_SCHEME = "x-apple.systempreferences:"
WINDOWS_APPS_FOLDER_SCHEME = "shell:AppsFolder\\"

WINDOWS_SHORTCUT_EXTENSIONS = (".exe", ".lnk")
WINDOWS_SYSTEM_TOOLS = (
    "notepad",
    "calc",
    "mspaint",
    "wordpad",
    "cmd",
    "powershell",
    "explorer",
    "taskmgr",
    "control",
)


def linux_application_dirs(home: Path) -> list[Path]:
    """XDG directories that hold .desktop launchers."""
    return [
        Path("/usr/share/applications"),
        Path("/usr/local/share/applications"),
        Path("/var/lib/flatpak/exports/share/applications"),
        home / ".local/share/flatpak/exports/share/applications",
        home / ".local/share/applications",
    ]


def parse_desktop_file(path: Path) -> AppEntry | None:
    """Read the [Desktop Entry] group of a .desktop file.

    Returns None for entries without a name or marked NoDisplay/Hidden.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None

    fields: dict[str, str] = {}
    in_entry = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("["):
            in_entry = line == "[Desktop Entry]"
            continue
        if not in_entry or "=" not in line:
            continue
        key, value = line.split("=", 1)
        fields.setdefault(key.strip(), value.strip())

    if fields.get("NoDisplay", "").lower() == "true":
        return None
    if fields.get("Hidden", "").lower() == "true":
        return None

    name = fields.get("Name")
    if not name:
        return None
    return AppEntry(name=name, path=str(path), icon=fields.get("Icon") or None)


def scan_linux_desktop_files(dirs: Iterable[Path]) -> list[AppEntry]:
    entries: list[AppEntry] = []
    for root in dirs:
        if not root.is_dir():
            continue
        base_depth = len(root.parts)
        for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            if len(Path(dirpath).parts) - base_depth >= DESKTOP_SCAN_DEPTH - 1:
                dirnames.clear()
            for filename in filenames:
                if not filename.endswith(".desktop"):
                    continue
                entry = parse_desktop_file(Path(dirpath) / filename)
                if entry is not None:
                    entries.append(entry)
    return entries


def scan_macos_app_dir(root: Path, entries: list[AppEntry]) -> None:
    """Collect .app bundles, recursing into plain folders (e.g. vendor suites)."""
    try:
        children = sorted(root.iterdir())
    except OSError as e:
        logger.debug("Cannot list %s: %s", root, e)
        return

    for child in children:
        if not child.is_dir():
            continue
        if child.suffix == ".app":
            if child.stem:
                entries.append(AppEntry(name=child.stem, path=str(child)))
        else:
            scan_macos_app_dir(child, entries)


def macos_settings_entries() -> list[AppEntry]:
    return [
        AppEntry(name=f"{name} Settings", path=f"{MACOS_SETTINGS_SCHEME}{pane}")
        for name, pane in MACOS_SETTINGS_PANES
    ]


def scan_windows_start_menu(dirs: Iterable[Path]) -> list[AppEntry]:
    entries: list[AppEntry] = []
    for root in dirs:
        if not root.is_dir():
            continue
        for dirpath, _dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            for filename in filenames:
                path = Path(dirpath) / filename
                if path.suffix.lower() in WINDOWS_SHORTCUT_EXTENSIONS and path.stem:
                    entries.append(AppEntry(name=path.stem, path=str(path)))
    return entries


def scan_windows_system_tools(system32: Path) -> list[AppEntry]:
    entries = []
    for tool in WINDOWS_SYSTEM_TOOLS:
        exe = system32 / f"{tool}.exe"
        if exe.is_file():
            entries.append(AppEntry(name=tool, path=str(exe)))
    return entries


def _log_walk_error(error: OSError) -> None:
    logger.debug("Skipping unreadable directory: %s", error)


def merge_duplicates(entries: Iterable[AppEntry]) -> list[AppEntry]:
    """Sort by case-insensitive name and collapse equal names.

    When two entries share a name the one carrying an icon wins; otherwise
    the first one seen is kept.
    """
    ordered = sorted(entries, key=lambda entry: entry.name.casefold())
    merged: list[AppEntry] = []
    for entry in ordered:
        if merged and merged[-1].name.casefold() == entry.name.casefold():
            if merged[-1].icon is None and entry.icon is not None:
                merged[-1] = entry
            continue
        merged.append(entry)
    return merged


def scan_applications(platform: str | None = None, home: Path | None = None) -> list[AppEntry]:
    """Enumerate installed applications for the current platform."""
    platform = platform or sys.platform
    home = home or Path.home()
    entries: list[AppEntry] = []

    if platform == "darwin":
        for folder in MACOS_APP_DIRS:
            scan_macos_app_dir(Path(folder), entries)
        scan_macos_app_dir(home / "Applications", entries)
        entries.extend(macos_settings_entries())
    elif platform == "win32":
        start_menus = [home / "AppData/Roaming/Microsoft/Windows/Start Menu/Programs"]
        program_data = os.environ.get("ProgramData")
        if program_data:
            start_menus.append(Path(program_data) / "Microsoft/Windows/Start Menu/Programs")
        entries.extend(scan_windows_start_menu(start_menus))
        system_root = os.environ.get("SystemRoot")
        if system_root:
            entries.extend(scan_windows_system_tools(Path(system_root) / "System32"))
    else:
        entries.extend(scan_linux_desktop_files(linux_application_dirs(home)))

    merged = merge_duplicates(entries)
    logger.info("Application scan found %d apps (%d before merge)", len(merged), len(entries))
    return merged


class AppDirectory:
    """
    Process-wide snapshot of installed applications.

    The snapshot is replaced wholesale, never mutated. Scans run without
    holding the lock; the lock only guards the snapshot and refresh timestamp.
    """

    def __init__(
        self,
        scanner: Callable[[], list[AppEntry]] = scan_applications,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            scanner: Callable performing a full application scan
            clock: Monotonic clock used for the refresh cooldown
        """
        self._scanner = scanner
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: tuple[AppEntry, ...] = ()
        self._initialized = False
        self._last_refresh: float | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _scan(self) -> tuple[AppEntry, ...]:
        try:
            return tuple(self._scanner())
        except Exception:
            logger.exception("Application scan failed")
            return ()

    def initialize(self) -> list[AppEntry]:
        """Run the startup scan. Later calls are no-ops."""
        with self._lock:
            if self._initialized:
                return list(self._entries)
            self._initialized = True
            self._last_refresh = self._clock()

        entries = self._scan()
        with self._lock:
            self._entries = entries
        return list(entries)

    def current(self) -> list[AppEntry]:
        """Return a copy of the current snapshot (empty before initialize)."""
        with self._lock:
            return list(self._entries)

    def refresh_if_cooldown_elapsed(self, cooldown: float) -> list[AppEntry] | None:
        """Rescan if at least cooldown seconds passed since the last scan.

        Returns:
            The new snapshot, or None when still cooling down.
        """
        with self._lock:
            now = self._clock()
            if self._last_refresh is not None and now - self._last_refresh < cooldown:
                return None
            # Claim the slot before scanning so concurrent callers back off
            self._last_refresh = now
            self._initialized = True

        logger.info("Refreshing application directory")
        entries = self._scan()
        with self._lock:
            self._entries = entries
        return list(entries)
