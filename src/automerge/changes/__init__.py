"""Change-set models and patch parsing."""

from automerge.changes.models import ChangedFile, ChangeSet, DiffLine, FileStatus, LineType
from automerge.changes.patch_parser import PatchParser

__all__ = [
    "ChangeSet",
    "ChangedFile",
    "DiffLine",
    "FileStatus",
    "LineType",
    "PatchParser",
]
