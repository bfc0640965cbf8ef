"""MCP tools for genieMCP server.

This module defines the tools exposed by the MCP server:
- search: Ranked launcher results for a free-text query
- calculate: Evaluate a single arithmetic expression
- check_launch: Validate a result payload before the UI opens it
- get_settings / update_settings: Read and change launcher settings
"""

from fastmcp import FastMCP

from genie_mcp.launch import check_launch_target, check_system_command
from genie_mcp.search import Launcher
from genie_mcp.settings import SettingsStore


def register_tools(mcp: FastMCP, launcher: Launcher, settings: SettingsStore) -> None:
    """Register all tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        launcher: Search front door
        settings: Settings store shared with the launcher
    """

    @mcp.tool()
    def search(query: str, limit: int | None = None) -> list[dict]:
        """Search installed apps, indexed files, the calculator and system commands.

        Results are sorted by score (higher is better). A web search entry is
        appended when nothing relevant is found.

        Args:
            query: Free-text launcher query
            limit: Optional cap on the number of results

        Returns:
            List of results with:
            - id: Stable source-prefixed id (app:, file:, calc:, sys:, web:)
            - title: Display title
            - subtitle: Secondary line (category or location)
            - category: APP, FILE, CALC, SYS or WEB
            - icon: Icon name or path
            - action_data: Payload to launch or copy
            - score: Relevance score
        """
        results = launcher.search(query)
        if limit is not None:
            results = results[: max(limit, 0)]
        return [result.to_dict() for result in results]

    @mcp.tool()
    def calculate(expression: str) -> str | None:
        """Evaluate an arithmetic expression (+ - * x / % ^ and parentheses).

        Returns:
            "<expression> = <result>", or null when the input is not a
            finite arithmetic expression.
        """
        return launcher.calculate(expression)

    @mcp.tool()
    def check_launch(action_data: str, category: str) -> dict:
        """Check whether a result may be launched.

        APP targets must exist (or be an allowed system settings URI), FILE
        targets must exist, WEB targets must be http(s) URLs, and SYS
        payloads must name a known system command.

        Returns:
            - allowed: Whether the launch may proceed
            - error: Reason when not allowed
        """
        if category == "SYS":
            error = check_system_command(action_data, launcher.platform)
        else:
            error = check_launch_target(action_data, category, launcher.platform)
        return {"allowed": error is None, "error": error}

    @mcp.tool()
    def get_settings() -> dict:
        """Return the current launcher settings."""
        return settings.get().to_dict()

    @mcp.tool()
    def update_settings(
        hotkey: str | None = None,
        max_results: int | None = None,
        launch_at_login: bool | None = None,
        theme: str | None = None,
        show_recent_apps: bool | None = None,
        search_folders: list[str] | None = None,
    ) -> dict:
        """Change one or more launcher settings and persist them.

        Changing search_folders makes the file index rebuild on the next query.

        Returns:
            - saved: Whether the settings were written
            - error: Error message if not saved
            - settings: Settings after the call
        """
        changes = {
            key: value
            for key, value in {
                "hotkey": hotkey,
                "max_results": max_results,
                "launch_at_login": launch_at_login,
                "theme": theme,
                "show_recent_apps": show_recent_apps,
                "search_folders": search_folders,
            }.items()
            if value is not None
        }
        error = settings.update(**changes) if changes else None
        return {
            "saved": error is None,
            "error": error,
            "settings": settings.get().to_dict(),
        }
