"""Hosting platform abstraction — every adapter implements this interface.

All methods raise ``PlatformError`` when the platform call fails. Nothing
is cached: each call reflects the platform's state at call time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Literal, Optional

from automerge.changes.models import ChangeSet

StatusState = Literal["pending", "success", "failure"]

STATUS_CONTEXT = "automerge"
MAX_STATUS_DESCRIPTION = 140


@dataclass(frozen=True)
class CheckRun:
    name: str
    status: str  # queued | in_progress | completed
    conclusion: Optional[str] = None  # success | failure | skipped | neutral | ...


@dataclass(frozen=True)
class BranchProtection:
    strict: bool = False  # head must be up to date with base before merging


class Platform(ABC):
    """One repository on a hosting platform."""

    repository: str

    # ---- queries ----

    @abstractmethod
    def get_change_set(self, number: int) -> ChangeSet:
        """Fetch the pull request and its changed files."""

    @abstractmethod
    def fetch_file(self, path: str, ref: Optional[str] = None) -> Optional[str]:
        """Return file text, or None when the file does not exist."""

    @abstractmethod
    def get_branch_protection(self, branch: str) -> Optional[BranchProtection]:
        """Return protection settings, or None for an unprotected branch."""

    @abstractmethod
    def behind_by(self, base_sha: str, head_sha: str) -> int:
        """Number of base commits missing from head."""

    @abstractmethod
    def list_check_runs(self, sha: str) -> List[CheckRun]: ...

    @abstractmethod
    def list_review_states(self, number: int) -> List[str]:
        """Review states (``APPROVED``, ``CHANGES_REQUESTED``, ``COMMENTED``...)."""

    # ---- mutations ----

    @abstractmethod
    def approve(self, number: int, body: str) -> None: ...

    @abstractmethod
    def set_status(self, sha: str, state: StatusState, description: str) -> None: ...

    @abstractmethod
    def merge(
        self,
        number: int,
        *,
        method: str,
        title: str,
        message: str,
        sha: Optional[str] = None,
    ) -> str:
        """Merge and return the merge commit SHA. Raises if nothing was merged."""

    @abstractmethod
    def delete_branch(self, ref: str) -> None: ...

    @abstractmethod
    def comment(self, number: int, body: str) -> None: ...


def truncate_description(description: str) -> str:
    if len(description) <= MAX_STATUS_DESCRIPTION:
        return description
    return description[: MAX_STATUS_DESCRIPTION - 1] + "…"
