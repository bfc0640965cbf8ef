"""Main entry point for genieMCP server."""

import argparse
import logging
import sys

from fastmcp import FastMCP

from genie_mcp.config import Config
from genie_mcp.resources import register_resources
from genie_mcp.search import AppDirectory, FileIndexCache, Launcher
from genie_mcp.settings import SettingsStore
from genie_mcp.sync import IndexWarmer
from genie_mcp.tools import register_tools

logger = logging.getLogger(__name__)


def build_launcher(config: Config, apps: AppDirectory | None = None) -> tuple[Launcher, SettingsStore]:
    """Load settings, scan applications and wire up the launcher.

    Args:
        config: Configuration instance with all settings.
        apps: Optional pre-built app directory (scanned here if not initialized).
    """
    logger.info("Loading settings from %s", config.settings_path)
    settings = SettingsStore(config.settings_path, home=config.home)
    settings.load()

    apps = apps or AppDirectory()
    if not apps.initialized:
        logger.info("Scanning installed applications...")
        count = len(apps.initialize())
        logger.info("Application scan complete: %d apps", count)

    files = FileIndexCache(ttl=config.index_ttl)
    launcher = Launcher(
        apps=apps,
        files=files,
        folders_provider=settings.search_folders,
        home=config.home,
        app_cooldown=config.app_cooldown,
    )

    # Start building the file index before the first query arrives
    files.maybe_refresh(settings.search_folders())
    return launcher, settings


def create_server(config: Config, apps: AppDirectory | None = None) -> FastMCP:
    """Create and configure the MCP server with all components.

    Args:
        config: Configuration instance with all settings.
        apps: Optional app directory, mainly for tests.
    """
    mcp = FastMCP(
        name="genieMCP",
        instructions=(
            "genieMCP is the search core of a desktop quick-launcher. Use the search "
            "tool to find apps, files, calculations and system commands for a query, "
            "and check_launch before opening a result."
        ),
    )

    launcher, settings = build_launcher(config, apps)

    if config.warm_interval > 0:
        warmer = IndexWarmer(launcher, settings, config.warm_interval)
        warmer.start()
    else:
        logger.info("Index warm-up disabled")

    logger.info("Registering resources...")
    register_resources(mcp, launcher, settings)

    logger.info("Registering tools...")
    register_tools(mcp, launcher, settings)

    logger.info("Server configured successfully")
    return mcp


def run_query(config: Config, query: str, wait: float = 2.0) -> int:
    """Run one search and print the ranked results."""
    launcher, _ = build_launcher(config)
    if not launcher.files.wait_for_refresh(timeout=wait):
        logger.warning("File index still building, results may be incomplete")

    results = launcher.search(query)
    for result in results:
        print(f"{result.score:>6}  {result.category.value:<4}  {result.title}  ({result.subtitle})")
    return 0 if results else 1


def main() -> None:
    """Main function - starts the MCP server."""
    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="genieMCP - launcher search core")
    parser.add_argument(
        "--query",
        metavar="TEXT",
        help="Run a single search, print the results and exit",
    )
    parser.add_argument(
        "--transport",
        choices=("stdio", "sse"),
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env()
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(2)

    logger.info("=" * 50)
    logger.info("genieMCP starting...")
    logger.info("  SETTINGS:     %s", config.settings_path)
    logger.info("  HOME:         %s", config.home)
    logger.info("  APP COOLDOWN: %gs", config.app_cooldown)
    logger.info("  INDEX TTL:    %gs", config.index_ttl)
    logger.info("  WARM-UP:      %s", f"{config.warm_interval:g}s" if config.warm_interval else "disabled")
    logger.info("=" * 50)

    if args.query is not None:
        sys.exit(run_query(config, args.query))

    try:
        mcp = create_server(config)
        if args.transport == "sse":
            logger.info("Starting MCP server on port %s...", config.port)
            mcp.run(transport="sse", host="127.0.0.1", port=config.port)
        else:
            mcp.run()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception:
        logger.exception("Server error")
        sys.exit(1)


if __name__ == "__main__":
    main()
