"""Data models for the search core."""

from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    """Source category of a search result."""

    APP = "APP"
    FILE = "FILE"
    CALC = "CALC"
    SYS = "SYS"
    WEB = "WEB"


@dataclass(frozen=True)
class AppEntry:
    """An installed application found by a directory scan."""

    name: str
    path: str  # Filesystem path or launch URI
    icon: str | None = None


@dataclass(frozen=True)
class FileEntry:
    """A file or folder held in the file index snapshot."""

    name: str
    path: str
    parent: str


@dataclass
class FileMatch:
    """A scored file index hit with its parent rendered for display."""

    name: str
    path: str
    parent: str
    score: int


@dataclass(frozen=True)
class FileIndexState:
    """One consistent file index snapshot.

    The folder set, entries and timestamp are always produced together
    and swapped as a unit.
    """

    folders: tuple[str, ...] = ()
    entries: tuple[FileEntry, ...] = ()
    built_at: float = 0.0  # Unix timestamp, 0.0 = never built


@dataclass
class SearchResult:
    """Represents one ranked, actionable result."""

    id: str  # Source-prefixed, e.g. "app:/Applications/Safari.app"
    title: str
    subtitle: str
    category: Category
    icon: str
    action_data: str
    score: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "category": self.category.value,
            "icon": self.icon,
            "action_data": self.action_data,
            "score": self.score,
        }


@dataclass
class SystemCommand:
    """A fixed system action and the words that signal intent for it."""

    name: str
    title: str
    subtitle: str
    icon: str
    keywords: tuple[str, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return f"sys:{self.name}"
