"""Launch eligibility checks.

The launcher UI performs the actual open/run; this module only decides
whether a target may be handed to it. Problems are returned as error
strings rather than raised.
"""

import sys
from pathlib import Path

import httpx

from genie_mcp.search.apps import MACOS_SETTINGS_SCHEME, WINDOWS_APPS_FOLDER_SCHEME
from genie_mcp.search.commands import get_system_commands
from genie_mcp.search.models import Category

LAUNCHABLE_CATEGORIES = (Category.APP, Category.FILE, Category.WEB)


def is_allowed_web_url(target: str) -> bool:
    try:
        url = httpx.URL(target)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def is_allowed_app_target(target: str, platform: str | None = None) -> bool:
    platform = platform or sys.platform
    if platform == "darwin" and target.startswith(MACOS_SETTINGS_SCHEME):
        return True
    if platform == "win32" and target.startswith(WINDOWS_APPS_FOLDER_SCHEME):
        return True
    return bool(target) and Path(target).exists()


def check_launch_target(action_data: str, category: str, platform: str | None = None) -> str | None:
    """Validate a launch request.

    Args:
        action_data: Result payload (path, URI or URL)
        category: Result category name (APP, FILE or WEB)
        platform: Platform name, defaults to sys.platform

    Returns:
        None if the target may be launched, otherwise an error message.
    """
    try:
        kind = Category(category)
    except ValueError:
        return f"Unsupported category: {category}"
    if kind not in LAUNCHABLE_CATEGORIES:
        return f"Unsupported category: {category}"

    if kind is Category.APP:
        allowed = is_allowed_app_target(action_data, platform)
    elif kind is Category.FILE:
        allowed = bool(action_data) and Path(action_data).exists()
    else:
        allowed = is_allowed_web_url(action_data)

    if not allowed:
        return f"Blocked launch target for category {category}: {action_data}"
    return None


def check_system_command(name: str, platform: str | None = None) -> str | None:
    """Return an error unless name is a system command known on platform."""
    if any(command.name == name for command in get_system_commands(platform)):
        return None
    return f"Unknown system command: {name}"
