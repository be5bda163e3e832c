"""Platform gate checker — re-verifies repository state right before merging.

Gates run in a fixed order and stop at the first failure:

1. ``mergeable``          PR is open, conflict-free, and its head has not moved
2. ``branch-protection``  a strict protected base requires an up-to-date head
3. ``status-checks``      no completed check may end in anything but success/skipped
4. ``reviews``            if reviews exist, at least one must approve

A gate that cannot query the platform passes (fail-open) unless
``settings.gate_failure_mode`` is ``"closed"``. A gate that breaks on the
data it got back always fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from automerge.changes.models import ChangeSet
from automerge.config.schema import Settings
from automerge.exceptions import GateCheckError
from automerge.hosting.base import Platform

logger = logging.getLogger(__name__)

APPROVED = "APPROVED"
PASSING_CONCLUSIONS = ("success", "skipped")


@dataclass(frozen=True)
class GateResult:
    gate: str
    passed: bool
    reason: str = ""
    errored: bool = False  # the verdict comes from the failure mode, not from data


@dataclass
class GateReport:
    results: List[GateResult] = field(default_factory=list)
    change_set: Optional[ChangeSet] = None  # freshest state seen while gating

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failure(self) -> Optional[GateResult]:
        return next((r for r in self.results if not r.passed), None)

    @property
    def reason(self) -> str:
        failed = self.failure
        return failed.reason if failed else ""


class _Gates:
    """Gate implementations sharing the platform and the refreshed PR."""

    def __init__(self, platform: Platform, change_set: ChangeSet) -> None:
        self.platform = platform
        self.evaluated = change_set
        self.current = change_set

    def _query(self, what: str, fn: Callable):
        try:
            return fn()
        except Exception as exc:  # noqa: BLE001
            raise GateCheckError(f"{what}: {exc}") from exc

    def mergeable(self) -> GateResult:
        fresh = self._query(
            "fetching PR state",
            lambda: self.platform.get_change_set(self.evaluated.number),
        )
        self.current = fresh
        if fresh.mergeable is False:
            return GateResult("mergeable", False, "PR has merge conflicts")
        if not fresh.is_open:
            return GateResult("mergeable", False, "PR is not open")
        if self.evaluated.head_sha and fresh.head_sha != self.evaluated.head_sha:
            return GateResult("mergeable", False, "PR head changed since evaluation")
        return GateResult("mergeable", True)

    def branch_protection(self) -> GateResult:
        pr = self.current
        protection = self._query(
            "reading branch protection",
            lambda: self.platform.get_branch_protection(pr.base_ref),
        )
        if protection is None or not protection.strict:
            return GateResult("branch-protection", True)
        behind = self._query(
            "comparing head with base",
            lambda: self.platform.behind_by(pr.base_sha, pr.head_sha),
        )
        if behind > 0:
            return GateResult("branch-protection", False, "Branch is behind base branch")
        return GateResult("branch-protection", True)

    def status_checks(self) -> GateResult:
        runs = self._query(
            "listing check runs",
            lambda: self.platform.list_check_runs(self.current.head_sha),
        )
        failed = [
            r.name for r in runs
            if r.status == "completed" and r.conclusion not in PASSING_CONCLUSIONS
        ]
        if failed:
            return GateResult("status-checks", False, f"Required checks failed: {', '.join(failed)}")
        pending = [r.name for r in runs if r.status != "completed"]
        if pending:
            return GateResult("status-checks", False, f"Required checks pending: {', '.join(pending)}")
        return GateResult("status-checks", True)

    def reviews(self) -> GateResult:
        states = self._query(
            "listing reviews",
            lambda: self.platform.list_review_states(self.current.number),
        )
        if states and APPROVED not in states:
            return GateResult("reviews", False, "Required reviews not completed")
        return GateResult("reviews", True)


def check_gates(
    platform: Platform,
    change_set: ChangeSet,
    settings: Optional[Settings] = None,
) -> GateReport:
    """Run every gate against fresh platform state. Never raises."""
    settings = settings or Settings()
    fail_closed = settings.gate_failure_mode == "closed"
    gates = _Gates(platform, change_set)

    checks: List[Tuple[str, Callable[[], GateResult]]] = [
        ("mergeable", gates.mergeable),
        ("branch-protection", gates.branch_protection),
    ]
    if settings.require_status_checks:
        checks.append(("status-checks", gates.status_checks))
    checks.append(("reviews", gates.reviews))

    report = GateReport()
    for name, check in checks:
        try:
            result = check()
        except GateCheckError as exc:
            if fail_closed:
                logger.warning("Gate %s could not be verified, failing closed: %s", name, exc)
                result = GateResult(name, False, f"Could not verify {name}: {exc}", errored=True)
            else:
                logger.warning("Gate %s could not be verified, allowing merge: %s", name, exc)
                result = GateResult(name, True, f"Could not verify {name}: {exc}", errored=True)
        except Exception:  # noqa: BLE001
            logger.exception("Gate %s raised unexpectedly", name)
            result = GateResult(name, False, f"Gate {name} raised an internal error", errored=True)
        report.results.append(result)
        if not result.passed:
            logger.info("PR #%s failed gate %s: %s", change_set.number, name, result.reason)
            break

    report.change_set = gates.current
    return report
