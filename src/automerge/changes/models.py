"""Data models for the change-set under evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class LineType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single line from a file patch."""

    file: str
    line_no: int  # new-side line number for added/context, old-side for removed
    content: str
    line_type: LineType


@dataclass(frozen=True)
class ChangedFile:
    """One file touched by the change-set."""

    path: str
    additions: int = 0
    deletions: int = 0
    status: FileStatus = FileStatus.MODIFIED
    patch: Optional[str] = None  # the platform omits patches for large/binary files

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


@dataclass
class ChangeSet:
    """A pull request at one point in time."""

    repository: str  # owner/name
    number: int
    author: str
    base_ref: str
    head_ref: str
    base_sha: str = ""
    head_sha: str = ""
    title: str = ""
    body: str = ""
    state: str = "open"
    mergeable: Optional[bool] = None  # None while the platform is still computing
    same_repository: bool = True  # head branch lives in the base repository
    files: List[ChangedFile] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    @property
    def total_changes(self) -> int:
        return sum(f.changes for f in self.files)
