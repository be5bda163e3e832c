"""Shared test fixtures — fake platform, change-set factory, sample patches."""

from __future__ import annotations

import dataclasses
import textwrap
from typing import Dict, Iterable, List, Optional

import pytest

from automerge.changes.models import ChangedFile, ChangeSet
from automerge.exceptions import PlatformError
from automerge.hosting.base import BranchProtection, CheckRun, Platform


def build_change_set(
    files: Iterable[str | ChangedFile] = ("README.md",),
    **overrides,
) -> ChangeSet:
    changed = [
        f if isinstance(f, ChangedFile) else ChangedFile(path=f, additions=1, deletions=0)
        for f in files
    ]
    values = dict(
        repository="acme/widgets",
        number=42,
        author="octocat",
        base_ref="main",
        head_ref="feature/docs",
        base_sha="base000",
        head_sha="head111",
        title="Update docs",
        state="open",
        mergeable=True,
        same_repository=True,
        files=changed,
    )
    values.update(overrides)
    return ChangeSet(**values)


class FakePlatform(Platform):
    """In-memory platform. Every call is recorded in ``calls``.

    Method names listed in ``fail`` raise ``PlatformError``; those mapped in
    ``errors`` raise the given exception instead.
    """

    def __init__(
        self,
        pr: Optional[ChangeSet] = None,
        *,
        protection: Optional[BranchProtection] = None,
        behind: int = 0,
        check_runs: Iterable[CheckRun] = (),
        reviews: Iterable[str] = (),
        files: Optional[Dict[str, str]] = None,
        fail: Iterable[str] = (),
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.repository = "acme/widgets"
        self.pr = pr or build_change_set()
        self.protection = protection
        self.behind = behind
        self.check_runs = list(check_runs)
        self.reviews = list(reviews)
        self.files = dict(files or {})
        self.fail = set(fail)
        self.errors = dict(errors or {})
        self.calls: List[tuple] = []
        self.statuses: List[tuple] = []
        self.comments: List[str] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.errors:
            raise self.errors[name]
        if name in self.fail:
            raise PlatformError(f"{name} exploded", status=500)

    @property
    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def get_change_set(self, number: int) -> ChangeSet:
        self._record("get_change_set", number)
        return dataclasses.replace(self.pr, files=list(self.pr.files))

    def fetch_file(self, path: str, ref: Optional[str] = None) -> Optional[str]:
        self._record("fetch_file", path)
        return self.files.get(path)

    def get_branch_protection(self, branch: str) -> Optional[BranchProtection]:
        self._record("get_branch_protection", branch)
        return self.protection

    def behind_by(self, base_sha: str, head_sha: str) -> int:
        self._record("behind_by", base_sha, head_sha)
        return self.behind

    def list_check_runs(self, sha: str) -> List[CheckRun]:
        self._record("list_check_runs", sha)
        return list(self.check_runs)

    def list_review_states(self, number: int) -> List[str]:
        self._record("list_review_states", number)
        return list(self.reviews)

    def approve(self, number: int, body: str) -> None:
        self._record("approve", number, body)
        self.reviews.append("APPROVED")

    def set_status(self, sha: str, state: str, description: str) -> None:
        self._record("set_status", sha, state, description)
        self.statuses.append((state, description))

    def merge(self, number: int, *, method: str, title: str, message: str, sha: Optional[str] = None) -> str:
        self._record("merge", number, method, title, message, sha)
        return "merge999"

    def delete_branch(self, ref: str) -> None:
        self._record("delete_branch", ref)

    def comment(self, number: int, body: str) -> None:
        self._record("comment", number, body)
        self.comments.append(body)


@pytest.fixture
def make_change_set():
    """Factory for ChangeSet objects with sensible defaults."""
    return build_change_set


@pytest.fixture
def fake_platform():
    """Factory for FakePlatform instances."""
    return FakePlatform


@pytest.fixture
def package_json_major_patch() -> str:
    """A package.json hunk bumping lodash from 1.x to 2.0.0."""
    return textwrap.dedent("""\
        @@ -10,7 +10,7 @@
           "dependencies": {
             "express": "^4.18.2",
        -    "lodash": "^1.3.1",
        +    "lodash": "^2.0.0",
             "zod": "^3.22.4"
           }
         }
    """)


@pytest.fixture
def package_json_minor_patch() -> str:
    """A package.json hunk with a minor bump."""
    return textwrap.dedent("""\
        @@ -10,7 +10,7 @@
           "dependencies": {
             "express": "^4.18.2",
        -    "lodash": "^4.17.20",
        +    "lodash": "^4.17.21",
             "zod": "^3.22.4"
           }
         }
    """)


@pytest.fixture
def requirements_major_patch() -> str:
    return textwrap.dedent("""\
        @@ -1,3 +1,3 @@
         click==8.1.7
        -pydantic==1.10.13
        +pydantic==2.0.0
         rich==13.7.0
    """)


@pytest.fixture
def sample_rule_document() -> dict:
    return {
        "version": "1",
        "rules": [
            {
                "name": "docs team",
                "enabled": True,
                "conditions": {"authorPatterns": ["docs-*"], "filePatterns": ["docs/**"]},
                "actions": {"autoMerge": True, "mergeMethod": "rebase"},
            },
            {
                "name": "bots",
                "description": "bot PRs",
                "enabled": True,
                "conditions": {"authorPatterns": ["*[bot]"], "blockPatterns": ["src/**"]},
                "actions": {"autoMerge": True, "autoApprove": False, "deleteBranch": False},
            },
        ],
        "settings": {"aiAnalysis": True, "riskThreshold": 0.4},
    }
