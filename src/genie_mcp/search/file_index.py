"""Background-refreshed file name index over the configured search folders.

Searches never wait for the filesystem: they score whatever snapshot is
current and, when it is stale, kick off a single background rebuild that
swaps in a new snapshot when done.
"""

import logging
import os
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from genie_mcp.search.models import FileEntry, FileIndexState, FileMatch
from genie_mcp.search.scorer import FUZZY_BAND_BASE, FUZZY_BAND_SPAN, score_match

logger = logging.getLogger(__name__)

INDEX_TTL_SECS = 300.0
MAX_SCAN_DEPTH = 2
MAX_SCAN_FILES = 12_000
MAX_FOLDER_SCAN_SECS = 0.120
MAX_RESULTS = 3
# Fuzzy-band hits need a similarity of at least 70/100
MIN_SCORE = FUZZY_BAND_BASE + FUZZY_BAND_SPAN * 7 // 10
MIN_QUERY_LEN = 3

HIDDEN_PREFIX = "."


def is_hidden(name: str) -> bool:
    return not name or name.startswith(HIDDEN_PREFIX)


def collect_folder_entries(
    root: Path,
    entries: list[FileEntry],
    max_depth: int = MAX_SCAN_DEPTH,
    max_files: int = MAX_SCAN_FILES,
    time_budget: float = MAX_FOLDER_SCAN_SECS,
) -> None:
    """Append entries under root until a depth, count or time budget runs out.

    The root itself is included. Hidden files are skipped and hidden
    directories are not descended into.
    """
    started = time.monotonic()
    if not is_hidden(root.name):
        entries.append(FileEntry(name=root.name, path=str(root), parent=str(root.parent)))
    base_depth = len(root.parts)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        depth = len(Path(dirpath).parts) - base_depth
        dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))
        children = dirnames + sorted(filenames)
        if depth + 1 >= max_depth:
            dirnames.clear()

        for name in children:
            if len(entries) >= max_files or time.monotonic() - started > time_budget:
                return
            if is_hidden(name):
                continue
            entries.append(FileEntry(name=name, path=os.path.join(dirpath, name), parent=dirpath))


def _log_walk_error(error: OSError) -> None:
    logger.debug("Skipping unreadable directory: %s", error)


def build_index(
    folders: Sequence[str],
    max_depth: int = MAX_SCAN_DEPTH,
    max_files: int = MAX_SCAN_FILES,
    time_budget: float = MAX_FOLDER_SCAN_SECS,
) -> list[FileEntry]:
    """Walk every configured folder with bounded depth, count and time."""
    entries: list[FileEntry] = []
    for folder in folders:
        root = Path(folder).expanduser()
        if not root.is_dir():
            logger.debug("Search folder %s does not exist, skipping", root)
            continue
        collect_folder_entries(root, entries, max_depth, max_files, time_budget)
        if len(entries) >= max_files:
            logger.info("File index capped at %d entries", max_files)
            break
    return entries


def display_parent(parent: str, home: Path) -> str:
    """Render parent relative to home when it lives under it."""
    try:
        relative = Path(parent).relative_to(home)
    except ValueError:
        return parent
    return "" if str(relative) == "." else str(relative)


class FileIndexCache:
    """
    TTL-bounded file index with single-flight background refresh.

    Thread Safety:
        The snapshot, the refreshing flag and the worker thread are guarded by
        one lock. The lock is never held while walking the filesystem or scoring.
    """

    def __init__(
        self,
        ttl: float = INDEX_TTL_SECS,
        max_depth: int = MAX_SCAN_DEPTH,
        max_files: int = MAX_SCAN_FILES,
        folder_time_budget: float = MAX_FOLDER_SCAN_SECS,
        max_results: int = MAX_RESULTS,
        min_score: int = MIN_SCORE,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_depth = max_depth
        self.max_files = max_files
        self.folder_time_budget = folder_time_budget
        self.max_results = max_results
        self.min_score = min_score
        self._clock = clock
        self._lock = threading.Lock()
        self._state = FileIndexState()
        self._refreshing = False
        self._thread: threading.Thread | None = None

    def snapshot(self) -> FileIndexState:
        """Return the current snapshot; folders, entries and built_at always match."""
        with self._lock:
            return self._state

    @property
    def refreshing(self) -> bool:
        with self._lock:
            return self._refreshing

    def _is_stale(self, folders: tuple[str, ...]) -> bool:
        state = self._state
        if not state.entries or state.folders != folders:
            return True
        return self._clock() - state.built_at > self.ttl

    def needs_refresh(self, folders: Sequence[str]) -> bool:
        """True if the index is empty, built for other folders, or older than the TTL."""
        with self._lock:
            return self._is_stale(tuple(folders))

    def maybe_refresh(self, folders: Sequence[str]) -> bool:
        """Start a background rebuild if needed and none is running.

        Returns:
            True if this call started a refresh.
        """
        folders = tuple(folders)
        with self._lock:
            if self._refreshing or not self._is_stale(folders):
                return False
            self._refreshing = True
            # wait_for_refresh only ever sees a started thread
            self._thread = threading.Thread(
                target=self._refresh,
                args=(folders,),
                name="genie-file-index",
                daemon=True,
            )
            self._thread.start()
        return True

    def _refresh(self, folders: tuple[str, ...]) -> None:
        """Worker body: build outside the lock, then swap the whole snapshot."""
        try:
            started = time.monotonic()
            entries = build_index(folders, self.max_depth, self.max_files, self.folder_time_budget)
            state = FileIndexState(folders=folders, entries=tuple(entries), built_at=self._clock())
            with self._lock:
                self._state = state
            logger.info(
                "File index rebuilt: %d entries from %d folders in %.0f ms",
                len(entries),
                len(folders),
                (time.monotonic() - started) * 1000,
            )
        except Exception:
            logger.exception("File index refresh failed")
        finally:
            with self._lock:
                self._refreshing = False

    def wait_for_refresh(self, timeout: float | None = None) -> bool:
        """Block until the last started refresh finishes.

        Returns:
            False if the refresh is still running after timeout.
        """
        with self._lock:
            thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def search(self, query: str, folders: Sequence[str], home: Path) -> list[FileMatch]:
        """Score the current snapshot against query.

        Queries shorter than MIN_QUERY_LEN return nothing. A stale snapshot
        is still searched while a refresh runs in the background.
        """
        query = query.strip()
        if len(query) < MIN_QUERY_LEN:
            return []

        self.maybe_refresh(folders)
        entries = self.snapshot().entries

        matches: list[FileMatch] = []
        for entry in entries:
            score = score_match(entry.name, query)
            if score is None or score < self.min_score:
                continue
            matches.append(
                FileMatch(
                    name=entry.name,
                    path=entry.path,
                    parent=display_parent(entry.parent, home),
                    score=score,
                )
            )

        matches.sort(key=lambda match: match.score, reverse=True)
        return matches[: self.max_results]
