"""Unified diff hunk parser for per-file patches.

The hosting platform reports one patch per changed file, starting directly
at the first ``@@`` hunk header. Yields DiffLine objects for added, removed
and context lines. Handles BOM, CRLF, ``\\ No newline at end of file`` and
both hunk header variations (with and without line counts).
"""

from __future__ import annotations

import re
from typing import Generator, List

from automerge.changes.models import DiffLine, LineType

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_NO_NEWLINE_RE = re.compile(r"^\\ No newline at end of file$")


def _strip_bom(line: str) -> str:
    """Remove UTF-8 BOM if present."""
    return line.lstrip("\ufeff")


def _normalise(line: str) -> str:
    """Strip trailing CR (CRLF → LF)."""
    return line.rstrip("\r")


class PatchParser:
    """Parse a single file's patch text.

    Usage::

        for line in PatchParser("package.json", patch).parse():
            if line.line_type is LineType.ADDED:
                ...
    """

    def __init__(self, path: str, patch: str) -> None:
        self._path = path
        self._lines = patch.splitlines()

    def parse(self) -> Generator[DiffLine, None, None]:
        old_no = 0
        new_no = 0
        in_hunk = False

        for raw in self._lines:
            line = _normalise(raw)

            hm = _HUNK_HEADER_RE.match(line)
            if hm:
                old_no = int(hm.group(1))
                new_no = int(hm.group(3))
                in_hunk = True
                continue

            if not in_hunk:
                # git-style file headers before the first hunk
                continue
            if _NO_NEWLINE_RE.match(line):
                continue

            if line.startswith("+"):
                yield DiffLine(self._path, new_no, _strip_bom(line[1:]), LineType.ADDED)
                new_no += 1
            elif line.startswith("-"):
                yield DiffLine(self._path, old_no, _strip_bom(line[1:]), LineType.REMOVED)
                old_no += 1
            elif line.startswith(" ") or line == "":
                yield DiffLine(self._path, new_no, line[1:], LineType.CONTEXT)
                old_no += 1
                new_no += 1

    def changed_lines(self) -> List[DiffLine]:
        """Only the added and removed lines."""
        return [d for d in self.parse() if d.line_type is not LineType.CONTEXT]
