"""
Search core for genieMCP.

Turns a free-text launcher query into ranked results drawn from installed
apps, indexed files, the inline calculator, system commands and a web
search fallback.
"""

from genie_mcp.search.aggregator import Launcher
from genie_mcp.search.apps import AppDirectory, merge_duplicates, scan_applications
from genie_mcp.search.calculator import evaluate_expression, try_calculate
from genie_mcp.search.commands import get_system_commands
from genie_mcp.search.file_index import FileIndexCache, build_index
from genie_mcp.search.models import (
    AppEntry,
    Category,
    FileEntry,
    FileIndexState,
    FileMatch,
    SearchResult,
    SystemCommand,
)
from genie_mcp.search.scorer import score_match

__all__ = [
    "AppDirectory",
    "AppEntry",
    "Category",
    "FileEntry",
    "FileIndexCache",
    "FileIndexState",
    "FileMatch",
    "Launcher",
    "SearchResult",
    "SystemCommand",
    "build_index",
    "evaluate_expression",
    "get_system_commands",
    "merge_duplicates",
    "scan_applications",
    "score_match",
    "try_calculate",
]
