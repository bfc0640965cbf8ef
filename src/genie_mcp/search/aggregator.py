"""Result aggregation: fan a query out to every source and rank the union."""

import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import httpx

from genie_mcp.search.apps import AppDirectory
from genie_mcp.search.calculator import try_calculate
from genie_mcp.search.commands import get_system_commands
from genie_mcp.search.file_index import FileIndexCache
from genie_mcp.search.models import AppEntry, Category, SearchResult
from genie_mcp.search.scorer import adjusted_system_score, score_match, system_match_score

logger = logging.getLogger(__name__)

APP_REFRESH_COOLDOWN_SECS = 20.0
APP_REFRESH_MIN_QUERY_LEN = 3
FILE_SCORE_PENALTY = 50
CALC_SCORE = 1000
WEB_SCORE = 10
LOW_CONFIDENCE_SCORE = 50
MAX_RESULTS = 64

WEB_SEARCH_URL = "https://www.google.com/search"

FILE_ICONS = {
    "image": ("png", "jpg", "jpeg", "gif", "bmp", "svg", "webp", "ico", "tiff"),
    "video": ("mp4", "mov", "avi", "mkv", "wmv", "flv", "webm"),
    "music": ("mp3", "wav", "flac", "aac", "ogg", "m4a", "wma"),
    "file-text": ("pdf", "doc", "docx", "rtf", "odt", "pages", "txt", "md", "log"),
    "file-spreadsheet": ("xls", "xlsx", "csv", "numbers"),
    "presentation": ("ppt", "pptx", "key", "keynote"),
    "archive": ("zip", "tar", "gz", "rar", "7z", "dmg"),
    "file-code": (
        "rs", "js", "ts", "py", "rb", "go", "c", "cpp", "h", "java", "swift", "kt",
        "vue", "jsx", "tsx", "sh", "css", "scss", "html",
    ),
    "file-json": ("json", "yaml", "yml", "toml", "xml", "ini", "env"),
    "type": ("ttf", "otf", "woff", "woff2"),
    "database": ("sql", "db", "sqlite"),
}
_ICON_BY_EXTENSION = {ext: icon for icon, exts in FILE_ICONS.items() for ext in exts}


def file_icon(path: Path) -> str:
    """Pick an icon name from the file extension."""
    icon = _ICON_BY_EXTENSION.get(path.suffix.lower().lstrip("."))
    if icon:
        return icon
    if path.is_dir():
        return "folder"
    return "file"


def web_search_url(query: str) -> str:
    """Build an escaped web search URL for query."""
    return str(httpx.URL(WEB_SEARCH_URL, params={"q": query}))


def app_results(apps: Sequence[AppEntry], query: str) -> list[SearchResult]:
    results = []
    for app in apps:
        score = score_match(app.name, query)
        if score is None:
            continue
        results.append(
            SearchResult(
                id=f"app:{app.path}",
                title=app.name,
                subtitle="Application",
                category=Category.APP,
                icon=app.icon or "layout-grid",
                action_data=app.path,
                score=score,
            )
        )
    return results


class Launcher:
    """
    Search front door combining apps, files, calculator, system commands
    and the web fallback into one ranked list.

    Each call is synchronous; only the file index refreshes in the background.
    """

    def __init__(
        self,
        apps: AppDirectory,
        files: FileIndexCache,
        folders_provider: Callable[[], Sequence[str]],
        home: Path,
        app_cooldown: float = APP_REFRESH_COOLDOWN_SECS,
        platform: str | None = None,
        max_results: int = MAX_RESULTS,
    ):
        """
        Args:
            apps: Application snapshot container
            files: File index cache
            folders_provider: Returns the currently configured search folders
            home: Home directory used to shorten file subtitles
            app_cooldown: Minimum seconds between on-demand app rescans
            platform: Platform name for system commands (defaults to sys.platform)
            max_results: Maximum results returned per query
        """
        self.apps = apps
        self.files = files
        self._folders_provider = folders_provider
        self.home = home
        self.app_cooldown = app_cooldown
        self.platform = platform or sys.platform
        self.max_results = max_results

    def search(self, query: str) -> list[SearchResult]:
        """Return ranked results for query; empty only for blank queries."""
        query = query.strip()
        if not query:
            return []

        normalized_query = query.lower()

        results = app_results(self.apps.current(), normalized_query)
        if not results and len(normalized_query) >= APP_REFRESH_MIN_QUERY_LEN:
            refreshed = self.apps.refresh_if_cooldown_elapsed(self.app_cooldown)
            if refreshed is not None:
                results.extend(app_results(refreshed, normalized_query))

        results.extend(self._file_results(query))

        calc = self.calculate(query)
        if calc is not None:
            results.append(
                SearchResult(
                    id="calc:result",
                    title=calc,
                    subtitle="Inline Calculator",
                    category=Category.CALC,
                    icon="calculator",
                    action_data=calc,
                    score=CALC_SCORE,
                )
            )

        results.extend(self._system_results(normalized_query))

        if all(result.score < LOW_CONFIDENCE_SCORE for result in results):
            results.append(
                SearchResult(
                    id="web:search",
                    title=f"Search web: {query}",
                    subtitle="Web fallback",
                    category=Category.WEB,
                    icon="globe",
                    action_data=web_search_url(query),
                    score=WEB_SCORE,
                )
            )

        results.sort(key=lambda result: result.score, reverse=True)
        logger.debug("Query %r produced %d results", query, len(results))
        return results[: self.max_results]

    def calculate(self, expression: str) -> str | None:
        """Evaluate a single arithmetic expression, or None if it is not one."""
        return try_calculate(expression)

    def _file_results(self, query: str) -> list[SearchResult]:
        try:
            folders = list(self._folders_provider())
        except Exception:
            logger.exception("Could not read search folders")
            return []

        results = []
        for match in self.files.search(query, folders, self.home):
            path = Path(match.path)
            subtitle = f"~/{match.parent}" if not Path(match.parent).is_absolute() else match.parent
            results.append(
                SearchResult(
                    id=f"file:{match.path}",
                    title=match.name,
                    subtitle=subtitle,
                    category=Category.FILE,
                    icon=file_icon(path),
                    action_data=match.path,
                    score=match.score - FILE_SCORE_PENALTY,
                )
            )
        return results

    def _system_results(self, query: str) -> list[SearchResult]:
        results = []
        for command in get_system_commands(self.platform):
            base = system_match_score(command.title.lower(), query)
            if base is None:
                base = system_match_score(command.subtitle.lower(), query)
            if base is None:
                continue
            score = adjusted_system_score(base, command, query)
            if score is None:
                continue
            results.append(
                SearchResult(
                    id=command.id,
                    title=command.title,
                    subtitle=command.subtitle,
                    category=Category.SYS,
                    icon=command.icon,
                    action_data=command.name,
                    score=score,
                )
            )
        return results
