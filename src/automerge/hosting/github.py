"""GitHub adapter backed by PyGithub."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

import requests
from github import Auth, Github, GithubException

from automerge.changes.models import ChangedFile, ChangeSet, FileStatus
from automerge.exceptions import PlatformError
from automerge.hosting.base import (
    STATUS_CONTEXT,
    BranchProtection,
    CheckRun,
    Platform,
    StatusState,
    truncate_description,
)

logger = logging.getLogger(__name__)


@contextmanager
def _api(action: str) -> Iterator[None]:
    """Translate PyGithub failures into PlatformError."""
    try:
        yield
    except GithubException as exc:
        message = exc.data.get("message") if isinstance(exc.data, dict) else None
        raise PlatformError(f"{action} failed: {message or exc}", status=exc.status) from exc
    except requests.RequestException as exc:
        raise PlatformError(f"{action} failed: {exc}") from exc


def _file_status(raw: str) -> FileStatus:
    try:
        return FileStatus(raw)
    except ValueError:
        return FileStatus.MODIFIED


class GitHubPlatform(Platform):
    """One GitHub repository, addressed as ``owner/name``."""

    def __init__(
        self,
        repository: str,
        token: Optional[str] = None,
        *,
        client: Optional[Github] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self.repository = repository
        if client is None:
            kwargs = {"base_url": base_url} if base_url else {}
            client = Github(auth=Auth.Token(token), **kwargs) if token else Github(**kwargs)
        self._client = client
        self._repo = None

    @property
    def repo(self):
        if self._repo is None:
            with _api(f"Loading repository {self.repository}"):
                self._repo = self._client.get_repo(self.repository)
        return self._repo

    def _pull(self, number: int):
        with _api(f"Loading PR #{number}"):
            return self.repo.get_pull(number)

    # ---- queries ----

    def get_change_set(self, number: int) -> ChangeSet:
        pr = self._pull(number)
        with _api(f"Listing files of PR #{number}"):
            files = [
                ChangedFile(
                    path=f.filename,
                    additions=f.additions,
                    deletions=f.deletions,
                    status=_file_status(f.status),
                    patch=f.patch,
                )
                for f in pr.get_files()
            ]
        head_repo = pr.head.repo
        return ChangeSet(
            repository=self.repository,
            number=pr.number,
            author=pr.user.login if pr.user else "",
            base_ref=pr.base.ref,
            head_ref=pr.head.ref,
            base_sha=pr.base.sha,
            head_sha=pr.head.sha,
            title=pr.title or "",
            body=pr.body or "",
            state=pr.state,
            mergeable=pr.mergeable,
            same_repository=head_repo is not None and head_repo.id == pr.base.repo.id,
            files=files,
        )

    def fetch_file(self, path: str, ref: Optional[str] = None) -> Optional[str]:
        try:
            with _api(f"Fetching {path}"):
                content = self.repo.get_contents(path, ref=ref) if ref else self.repo.get_contents(path)
        except PlatformError as exc:
            if exc.status == 404:
                return None
            raise
        if isinstance(content, list):
            raise PlatformError(f"{path} is not a file")
        try:
            return content.decoded_content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PlatformError(f"{path} is not valid UTF-8: {exc}") from exc

    def get_branch_protection(self, branch: str) -> Optional[BranchProtection]:
        try:
            with _api(f"Reading protection of {branch}"):
                protection = self.repo.get_branch(branch).get_protection()
        except PlatformError as exc:
            if exc.status == 404:
                return None
            raise
        checks = protection.required_status_checks
        return BranchProtection(strict=bool(checks and checks.strict))

    def behind_by(self, base_sha: str, head_sha: str) -> int:
        with _api(f"Comparing {base_sha[:7]}...{head_sha[:7]}"):
            return self.repo.compare(base_sha, head_sha).behind_by

    def list_check_runs(self, sha: str) -> List[CheckRun]:
        with _api(f"Listing check runs for {sha[:7]}"):
            return [
                CheckRun(name=run.name, status=run.status, conclusion=run.conclusion)
                for run in self.repo.get_commit(sha).get_check_runs()
            ]

    def list_review_states(self, number: int) -> List[str]:
        pr = self._pull(number)
        with _api(f"Listing reviews of PR #{number}"):
            return [review.state for review in pr.get_reviews()]

    # ---- mutations ----

    def approve(self, number: int, body: str) -> None:
        pr = self._pull(number)
        with _api(f"Approving PR #{number}"):
            pr.create_review(body=body, event="APPROVE")

    def set_status(self, sha: str, state: StatusState, description: str) -> None:
        with _api(f"Setting {state} status on {sha[:7]}"):
            self.repo.get_commit(sha).create_status(
                state=state,
                description=truncate_description(description),
                context=STATUS_CONTEXT,
            )

    def merge(
        self,
        number: int,
        *,
        method: str,
        title: str,
        message: str,
        sha: Optional[str] = None,
    ) -> str:
        pr = self._pull(number)
        kwargs = {"sha": sha} if sha else {}
        with _api(f"Merging PR #{number}"):
            status = pr.merge(
                commit_title=title,
                commit_message=message,
                merge_method=method,
                **kwargs,
            )
        if not status.merged:
            raise PlatformError(status.message or f"PR #{number} was not merged")
        logger.debug("Merged PR #%s into %s", number, status.sha)
        return status.sha

    def delete_branch(self, ref: str) -> None:
        with _api(f"Deleting branch {ref}"):
            self.repo.get_git_ref(f"heads/{ref}").delete()

    def comment(self, number: int, body: str) -> None:
        pr = self._pull(number)
        with _api(f"Commenting on PR #{number}"):
            pr.create_issue_comment(body)
