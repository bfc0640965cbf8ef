"""MCP Resources for genieMCP.

Resources expose the launcher's current snapshots as read-only URIs.
"""

import time
from datetime import datetime

import yaml

from genie_mcp.search import Launcher
from genie_mcp.settings import SettingsStore


def get_apps_resource(launcher: Launcher) -> str:
    """Resource: genie://apps

    Lists the applications in the current App Directory snapshot.
    """
    apps = launcher.apps.current()

    result_lines = ["# Installed Applications\n"]
    result_lines.append(f"Total apps: {len(apps)}\n")
    result_lines.append("\n")

    for app in apps:
        line = f"- **{app.name}** `{app.path}`"
        if app.icon:
            line += f" (icon: {app.icon})"
        result_lines.append(line + "\n")

    return "".join(result_lines)


def get_index_resource(launcher: Launcher, now: float | None = None) -> str:
    """Resource: genie://index

    Shows the file index snapshot: folders, size, age and refresh state.
    """
    state = launcher.files.snapshot()
    now = time.time() if now is None else now

    result_lines = ["# File Index\n\n"]
    if state.built_at:
        built = datetime.fromtimestamp(state.built_at).isoformat(timespec="seconds")
        result_lines.append(f"**Built:** {built} ({now - state.built_at:.0f}s ago)\n")
    else:
        result_lines.append("**Built:** never\n")
    result_lines.append(f"**Entries:** {len(state.entries)}\n")
    result_lines.append(f"**TTL:** {launcher.files.ttl:g}s\n")
    result_lines.append(f"**Refreshing:** {'yes' if launcher.files.refreshing else 'no'}\n\n")

    result_lines.append("## Folders\n\n")
    if state.folders:
        for folder in state.folders:
            result_lines.append(f"- `{folder}`\n")
    else:
        result_lines.append("No folders indexed yet.\n")

    return "".join(result_lines)


def get_settings_resource(settings: SettingsStore) -> str:
    """Resource: genie://settings

    Current settings as YAML, as they would be written to disk.
    """
    return yaml.safe_dump(settings.get().to_dict(), sort_keys=False)


def register_resources(mcp, launcher: Launcher, settings: SettingsStore):
    """Register all resources with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        launcher: Search front door
        settings: Settings store
    """

    @mcp.resource("genie://apps")
    def list_apps():
        """List installed applications known to the launcher."""
        return get_apps_resource(launcher)

    @mcp.resource("genie://index")
    def index_status():
        """Show the file index status."""
        return get_index_resource(launcher)

    @mcp.resource("genie://settings")
    def current_settings():
        """Show the current launcher settings."""
        return get_settings_resource(settings)
