"""Merge executor — approval, merge, cleanup, and notification.

States::

    PENDING_APPROVAL -> APPROVING -> PENDING_MERGE -> MERGING -> MERGED
                 \\            \\                        \\
                  +------------+------------------------+--> FAILED

Any fault raised by approval or the merge call takes the FAILED path. The
merge call is issued at most once and never retried. Everything after
a successful merge is best-effort and cannot turn the outcome into a failure.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from automerge.changes.models import ChangeSet
from automerge.config.schema import Settings
from automerge.engine.models import EvaluationResult
from automerge.exceptions import ExecutionError, PostActionError
from automerge.hosting.base import Platform, StatusState
from automerge.hosting.gates import APPROVED, GateReport
from automerge.output import markdown

logger = logging.getLogger(__name__)

DEFAULT_MERGE_METHOD = "squash"

STEP_APPROVE = "approve"
STEP_DELETE_BRANCH = "delete-branch"
STEP_COMMENT = "comment"


def merge_step(method: str) -> str:
    return f"merge({method})"


class MergeState(str, Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVING = "approving"
    PENDING_MERGE = "pending_merge"
    MERGING = "merging"
    MERGED = "merged"
    FAILED = "failed"


@dataclass
class ExecutionOutcome:
    success: bool
    state: MergeState
    steps: List[str] = field(default_factory=list)
    error: Optional[str] = None
    merge_sha: Optional[str] = None
    warnings: List[str] = field(default_factory=list)  # best-effort steps that failed


class MergeExecutor:
    """Carry out one merge for one change-set."""

    def __init__(
        self,
        platform: Platform,
        settings: Optional[Settings] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 0.5,
    ) -> None:
        self.platform = platform
        self.settings = settings or Settings()
        self._sleep = sleep
        self._clock = clock
        self._poll_interval = poll_interval

    # ---- helpers ----

    def _marker(self, change_set: ChangeSet, state: StatusState, description: str) -> None:
        try:
            self.platform.set_status(change_set.head_sha, state, description)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to set %s status on PR #%s: %s", state, change_set.number, exc)

    def _post_action(self, outcome: ExecutionOutcome, step: str, action: Callable[[], None]) -> None:
        try:
            action()
        except Exception as exc:  # noqa: BLE001
            error = PostActionError(f"{step}: {exc}")
            logger.warning("Post-merge step failed, merge still succeeded: %s", error)
            outcome.warnings.append(str(error))
            return
        outcome.steps.append(step)

    def _settle(self, number: int) -> None:
        """Wait until the approval is visible, at most ``settle_seconds``."""
        deadline = self._clock() + self.settings.settle_seconds
        while True:
            try:
                if APPROVED in self.platform.list_review_states(number):
                    return
            except Exception as exc:  # noqa: BLE001
                logger.debug("Could not read reviews while settling: %s", exc)
            remaining = deadline - self._clock()
            if remaining <= 0:
                logger.info("Approval on PR #%s not visible yet, merging anyway", number)
                return
            self._sleep(min(self._poll_interval, remaining))

    # ---- state machine ----

    def execute(
        self,
        evaluation: EvaluationResult,
        change_set: ChangeSet,
        gates: GateReport,
    ) -> ExecutionOutcome:
        if not evaluation.should_merge:
            return ExecutionOutcome(False, MergeState.FAILED, error=f"not eligible: {evaluation.reason}")
        if not gates.passed:
            return ExecutionOutcome(False, MergeState.FAILED, error=f"gate failed: {gates.reason}")

        pr = gates.change_set or change_set
        rule = evaluation.rule
        method = rule.actions.merge_method if rule else DEFAULT_MERGE_METHOD
        outcome = ExecutionOutcome(False, MergeState.PENDING_APPROVAL)

        logger.info("Performing auto-merge for PR #%s (%s)", pr.number, evaluation.reason)
        self._marker(pr, "pending", "Automerge is processing this PR...")

        try:
            if rule is None or rule.actions.auto_approve:
                outcome.state = MergeState.APPROVING
                body = markdown.approval_body(
                    evaluation.reason, evaluation.risk, self.settings.risk_threshold
                )
                try:
                    self.platform.approve(pr.number, body)
                except Exception as exc:  # noqa: BLE001
                    raise ExecutionError(f"approval failed: {exc}") from exc
                outcome.steps.append(STEP_APPROVE)
                self._settle(pr.number)

            outcome.state = MergeState.PENDING_MERGE
            self._marker(pr, "pending", "Automerge is merging this PR...")

            outcome.state = MergeState.MERGING
            try:
                outcome.merge_sha = self.platform.merge(
                    pr.number,
                    method=method,
                    title=markdown.commit_title(pr),
                    message=markdown.commit_message(evaluation.reason, evaluation.risk),
                    sha=pr.head_sha or None,
                )
            except Exception as exc:  # noqa: BLE001
                raise ExecutionError(str(exc)) from exc
            outcome.steps.append(merge_step(method))
        except ExecutionError as exc:
            return self._fail(pr, outcome, exc)

        outcome.state = MergeState.MERGED
        outcome.success = True
        logger.info("Successfully auto-merged PR #%s", pr.number)
        self._marker(pr, "success", f"Successfully merged using {method} method")

        delete = (rule is None or rule.actions.delete_branch) and self.settings.auto_delete_branches
        if delete and pr.same_repository:
            self._post_action(
                outcome, STEP_DELETE_BRANCH, lambda: self.platform.delete_branch(pr.head_ref)
            )
        elif delete:
            logger.debug("Not deleting %s: branch lives in a fork", pr.head_ref)

        self._post_action(
            outcome,
            STEP_COMMENT,
            lambda: self.platform.comment(pr.number, markdown.success_comment(method, evaluation.reason)),
        )
        return outcome

    def _fail(self, pr: ChangeSet, outcome: ExecutionOutcome, exc: ExecutionError) -> ExecutionOutcome:
        logger.error("Failed to auto-merge PR #%s: %s", pr.number, exc)
        outcome.state = MergeState.FAILED
        outcome.success = False
        outcome.error = str(exc)
        self._marker(pr, "failure", f"Auto-merge failed: {exc}")
        try:
            self.platform.comment(pr.number, markdown.failure_comment(str(exc)))
        except Exception as err:  # noqa: BLE001
            logger.warning("Could not explain failure on PR #%s: %s", pr.number, err)
            outcome.warnings.append(f"{STEP_COMMENT}: {err}")
        else:
            outcome.steps.append(STEP_COMMENT)
        return outcome
