"""Tests for the file index cache."""

import threading
from pathlib import Path

import pytest

from genie_mcp.search.file_index import (
    MIN_SCORE,
    FileIndexCache,
    build_index,
    collect_folder_entries,
    display_parent,
)
from genie_mcp.search.models import FileEntry, FileIndexState


@pytest.fixture
def docs(tmp_path: Path) -> Path:
    """A small search folder with nested, hidden and deep entries."""
    root = tmp_path / "Documents"
    (root / "taxes").mkdir(parents=True)
    (root / "taxes" / "deep").mkdir()
    (root / ".secret").mkdir()
    (root / "report-2024.pdf").write_text("x")
    (root / "notes.txt").write_text("x")
    (root / ".hidden.txt").write_text("x")
    (root / "taxes" / "receipt.png").write_text("x")
    (root / "taxes" / "deep" / "buried.txt").write_text("x")
    (root / ".secret" / "keys.txt").write_text("x")
    return root


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestCollect:
    def test_walks_two_levels(self, docs: Path):
        entries: list[FileEntry] = []
        collect_folder_entries(docs, entries)
        names = {e.name for e in entries}
        assert {"Documents", "taxes", "report-2024.pdf", "notes.txt", "receipt.png", "deep"} <= names
        assert "buried.txt" not in names

    def test_skips_hidden(self, docs: Path):
        entries: list[FileEntry] = []
        collect_folder_entries(docs, entries)
        names = {e.name for e in entries}
        assert ".hidden.txt" not in names
        assert ".secret" not in names
        assert "keys.txt" not in names

    def test_parent_recorded(self, docs: Path):
        entries: list[FileEntry] = []
        collect_folder_entries(docs, entries)
        receipt = next(e for e in entries if e.name == "receipt.png")
        assert receipt.parent == str(docs / "taxes")
        assert receipt.path == str(docs / "taxes" / "receipt.png")

    def test_file_cap(self, docs: Path):
        entries: list[FileEntry] = []
        collect_folder_entries(docs, entries, max_files=3)
        assert len(entries) == 3

    def test_time_budget(self, docs: Path):
        entries: list[FileEntry] = []
        collect_folder_entries(docs, entries, time_budget=-1)
        # Only the root itself is recorded before the budget check
        assert [e.name for e in entries] == ["Documents"]


class TestBuildIndex:
    def test_skips_missing_folders(self, docs: Path, tmp_path: Path):
        entries = build_index([str(tmp_path / "nope"), str(docs)])
        assert any(e.name == "notes.txt" for e in entries)

    def test_global_cap_stops_later_folders(self, docs: Path, tmp_path: Path):
        other = tmp_path / "Other"
        other.mkdir()
        (other / "elsewhere.txt").write_text("x")
        entries = build_index([str(docs), str(other)], max_files=2)
        assert len(entries) == 2
        assert all(not e.path.startswith(str(other)) for e in entries)


def test_display_parent(tmp_path: Path):
    assert display_parent(str(tmp_path / "Documents" / "taxes"), tmp_path) == str(Path("Documents/taxes"))
    assert display_parent(str(tmp_path), tmp_path) == ""
    assert display_parent("/elsewhere/dir", tmp_path / "home") == "/elsewhere/dir"


class TestNeedsRefresh:
    def test_empty_index_needs_refresh(self):
        assert FileIndexCache().needs_refresh(["/a"])

    def test_fresh_matching_index(self):
        clock = FakeClock()
        cache = FileIndexCache(clock=clock)
        cache._state = FileIndexState(
            folders=("/a",), entries=(FileEntry("x", "/a/x", "/a"),), built_at=clock.now
        )
        assert not cache.needs_refresh(["/a"])

    def test_folder_change_needs_refresh(self):
        clock = FakeClock()
        cache = FileIndexCache(clock=clock)
        cache._state = FileIndexState(
            folders=("/a",), entries=(FileEntry("x", "/a/x", "/a"),), built_at=clock.now
        )
        assert cache.needs_refresh(["/a", "/b"])

    def test_ttl_expiry_needs_refresh(self):
        clock = FakeClock()
        cache = FileIndexCache(ttl=300, clock=clock)
        cache._state = FileIndexState(
            folders=("/a",), entries=(FileEntry("x", "/a/x", "/a"),), built_at=clock.now
        )
        clock.now += 301
        assert cache.needs_refresh(["/a"])


class TestRefresh:
    def test_refresh_builds_snapshot(self, docs: Path):
        cache = FileIndexCache()
        assert cache.maybe_refresh([str(docs)])
        assert cache.wait_for_refresh(timeout=5)

        state = cache.snapshot()
        assert state.folders == (str(docs),)
        assert any(e.name == "notes.txt" for e in state.entries)
        assert state.built_at > 0
        assert not cache.refreshing

    def test_no_refresh_when_fresh(self, docs: Path):
        cache = FileIndexCache()
        cache.maybe_refresh([str(docs)])
        cache.wait_for_refresh(timeout=5)
        assert not cache.maybe_refresh([str(docs)])

    def test_single_flight(self, docs: Path, monkeypatch):
        release = threading.Event()
        calls = []

        def slow_build(folders, *args):
            calls.append(folders)
            release.wait(5)
            return [FileEntry("notes.txt", str(docs / "notes.txt"), str(docs))]

        monkeypatch.setattr("genie_mcp.search.file_index.build_index", slow_build)
        cache = FileIndexCache()
        try:
            assert cache.maybe_refresh([str(docs)])
            assert cache.refreshing
            assert not cache.maybe_refresh([str(docs)])
            assert not cache.maybe_refresh(["/somewhere/else"])
        finally:
            release.set()
        assert cache.wait_for_refresh(timeout=5)
        assert len(calls) == 1

    def test_wait_sees_running_refresh(self, docs: Path, monkeypatch):
        release = threading.Event()

        def slow_build(folders, *args):
            release.wait(5)
            return [FileEntry("notes.txt", str(docs / "notes.txt"), str(docs))]

        monkeypatch.setattr("genie_mcp.search.file_index.build_index", slow_build)
        cache = FileIndexCache()
        try:
            assert cache.maybe_refresh([str(docs)])
            assert not cache.wait_for_refresh(timeout=0.05)
        finally:
            release.set()
        assert cache.wait_for_refresh(timeout=5)
        assert cache.snapshot().entries[0].name == "notes.txt"

    def test_failed_refresh_keeps_old_snapshot(self, monkeypatch):
        def broken(*args):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr("genie_mcp.search.file_index.build_index", broken)
        cache = FileIndexCache()
        cache.maybe_refresh(["/a"])
        assert cache.wait_for_refresh(timeout=5)
        assert cache.snapshot() == FileIndexState()
        assert not cache.refreshing

    def test_snapshot_fields_always_belong_together(self, tmp_path: Path):
        folders = []
        for i in range(3):
            folder = tmp_path / f"set{i}"
            folder.mkdir()
            for j in range(20):
                (folder / f"file{j}.txt").write_text("x")
            folders.append(str(folder))

        cache = FileIndexCache(ttl=0)
        observed: list[FileIndexState] = []
        stop = threading.Event()

        def observe():
            while not stop.is_set():
                observed.append(cache.snapshot())

        observer = threading.Thread(target=observe)
        observer.start()
        try:
            for _ in range(30):
                for folder in folders:
                    cache.maybe_refresh([folder])
            cache.wait_for_refresh(timeout=5)
        finally:
            stop.set()
            observer.join()

        observed.append(cache.snapshot())
        for state in observed:
            if not state.folders:
                assert state.entries == ()
                continue
            (folder,) = state.folders
            assert all(e.path.startswith(folder) for e in state.entries)


class TestSearch:
    @pytest.mark.parametrize("query", ["", "a", "no", "  ab  "])
    def test_short_queries_return_nothing(self, query: str):
        cache = FileIndexCache()
        cache._state = FileIndexState(
            folders=("/a",), entries=(FileEntry("notes.txt", "/a/notes.txt", "/a"),), built_at=1.0
        )
        assert cache.search(query, ["/a"], Path("/")) == []

    def test_short_query_does_not_trigger_refresh(self):
        cache = FileIndexCache()
        cache.search("ab", ["/a"], Path("/"))
        assert not cache.refreshing
        assert cache._thread is None

    def test_first_search_starts_refresh(self, docs: Path, tmp_path: Path):
        cache = FileIndexCache()
        # Nothing indexed yet: the search starts a refresh without waiting for it
        cache.search("notes", [str(docs)], tmp_path)
        assert cache._thread is not None
        assert cache.wait_for_refresh(timeout=5)

        matches = cache.search("notes", [str(docs)], tmp_path)
        assert matches[0].name == "notes.txt"
        assert matches[0].parent == "Documents"

    def test_results_sorted_and_truncated(self, docs: Path, tmp_path: Path):
        for i in range(6):
            (docs / f"report-{i}.txt").write_text("x")
        cache = FileIndexCache(max_results=3)
        cache.maybe_refresh([str(docs)])
        cache.wait_for_refresh(timeout=5)

        matches = cache.search("report", [str(docs)], tmp_path)
        assert len(matches) == 3
        assert [m.score for m in matches] == sorted((m.score for m in matches), reverse=True)

    def test_min_score_filter(self, docs: Path, tmp_path: Path):
        cache = FileIndexCache(min_score=100_000)
        cache.maybe_refresh([str(docs)])
        cache.wait_for_refresh(timeout=5)
        assert cache.search("notes", [str(docs)], tmp_path) == []

    def test_default_min_score_drops_weak_fuzzy_match(self, tmp_path: Path):
        folder = tmp_path / "Letters"
        folder.mkdir()
        # "abcd" is a full subsequence of both names, but only the second keeps it close together
        (folder / "axxbxxcxxd.txt").write_text("x")
        (folder / "abxcd.txt").write_text("x")
        cache = FileIndexCache()
        cache.maybe_refresh([str(folder)])
        cache.wait_for_refresh(timeout=5)

        matches = cache.search("abcd", [str(folder)], tmp_path)
        assert [m.name for m in matches] == ["abxcd.txt"]
        assert all(m.score >= MIN_SCORE for m in matches)
