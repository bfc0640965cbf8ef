"""Fixed system commands offered alongside search results."""

import sys

from genie_mcp.search.models import SystemCommand

SYSTEM_COMMANDS = (
    SystemCommand(
        name="settings",
        title="Genie Settings",
        subtitle="Configure hotkey, theme, and more",
        icon="settings",
        keywords=("setting", "theme", "hotkey", "shortcut", "config", "preference"),
    ),
    SystemCommand(
        name="sleep",
        title="Sleep Device",
        subtitle="System command",
        icon="moon",
        keywords=("sleep", "suspend"),
    ),
    SystemCommand(
        name="lock",
        title="Lock Screen",
        subtitle="System command",
        icon="lock",
        keywords=("lock",),
    ),
)

# Media controls talk to Spotify through AppleScript, so they are macOS only
MEDIA_COMMANDS = (
    SystemCommand(
        name="spotify_play",
        title="Spotify: Play",
        subtitle="Media control",
        icon="play",
        keywords=("play", "resume"),
    ),
    SystemCommand(
        name="spotify_pause",
        title="Spotify: Pause",
        subtitle="Media control",
        icon="pause",
        keywords=("pause", "stop music"),
    ),
    SystemCommand(
        name="spotify_next",
        title="Spotify: Next Track",
        subtitle="Media control",
        icon="skip-forward",
        keywords=("next", "skip"),
    ),
    SystemCommand(
        name="spotify_prev",
        title="Spotify: Previous Track",
        subtitle="Media control",
        icon="skip-back",
        keywords=("previous", "prev", "back"),
    ),
)


def get_system_commands(platform: str | None = None) -> tuple[SystemCommand, ...]:
    """Return the commands available on platform (defaults to sys.platform)."""
    platform = platform or sys.platform
    if platform == "darwin":
        return SYSTEM_COMMANDS + MEDIA_COMMANDS
    return SYSTEM_COMMANDS
