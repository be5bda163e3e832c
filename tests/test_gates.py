"""Tests for the pre-merge platform gates."""

from automerge.config.schema import Settings
from automerge.hosting.base import BranchProtection, CheckRun
from automerge.hosting.gates import check_gates


class TestMergeableGate:
    def test_all_gates_pass(self, fake_platform, make_change_set):
        platform = fake_platform(check_runs=[CheckRun("ci", "completed", "success")])
        report = check_gates(platform, make_change_set())
        assert report.passed is True
        assert [r.gate for r in report.results] == [
            "mergeable", "branch-protection", "status-checks", "reviews",
        ]

    def test_conflicts(self, fake_platform, make_change_set):
        platform = fake_platform(make_change_set(mergeable=False))
        report = check_gates(platform, make_change_set())
        assert report.passed is False
        assert report.reason == "PR has merge conflicts"
        assert len(report.results) == 1

    def test_unknown_mergeability_passes(self, fake_platform, make_change_set):
        platform = fake_platform(make_change_set(mergeable=None))
        assert check_gates(platform, make_change_set()).passed is True

    def test_closed_pr(self, fake_platform, make_change_set):
        platform = fake_platform(make_change_set(state="closed"))
        assert check_gates(platform, make_change_set()).reason == "PR is not open"

    def test_head_moved(self, fake_platform, make_change_set):
        platform = fake_platform(make_change_set(head_sha="newer222"))
        report = check_gates(platform, make_change_set())
        assert report.reason == "PR head changed since evaluation"

    def test_fresh_state_reported(self, fake_platform, make_change_set):
        platform = fake_platform(make_change_set(title="Fresh title"))
        report = check_gates(platform, make_change_set())
        assert report.change_set.title == "Fresh title"


class TestBranchProtectionGate:
    def test_strict_and_behind(self, fake_platform, make_change_set):
        platform = fake_platform(protection=BranchProtection(strict=True), behind=3)
        report = check_gates(platform, make_change_set())
        assert report.reason == "Branch is behind base branch"
        assert ("behind_by", "base000", "head111") in platform.calls

    def test_strict_and_up_to_date(self, fake_platform, make_change_set):
        platform = fake_platform(protection=BranchProtection(strict=True), behind=0)
        assert check_gates(platform, make_change_set()).passed is True

    def test_not_strict_skips_compare(self, fake_platform, make_change_set):
        platform = fake_platform(protection=BranchProtection(strict=False), behind=3)
        assert check_gates(platform, make_change_set()).passed is True
        assert "behind_by" not in platform.call_names


class TestStatusChecksGate:
    def test_failing_check_named(self, fake_platform, make_change_set):
        platform = fake_platform(check_runs=[
            CheckRun("lint", "completed", "success"),
            CheckRun("unit-tests", "completed", "failure"),
        ])
        report = check_gates(platform, make_change_set())
        assert report.passed is False
        assert report.failure.gate == "status-checks"
        assert "unit-tests" in report.reason
        assert "lint" not in report.reason

    def test_neutral_and_cancelled_fail(self, fake_platform, make_change_set):
        platform = fake_platform(check_runs=[
            CheckRun("a", "completed", "neutral"),
            CheckRun("b", "completed", "cancelled"),
        ])
        assert check_gates(platform, make_change_set()).reason == "Required checks failed: a, b"

    def test_skipped_passes(self, fake_platform, make_change_set):
        platform = fake_platform(check_runs=[CheckRun("docs", "completed", "skipped")])
        assert check_gates(platform, make_change_set()).passed is True

    def test_pending_checks(self, fake_platform, make_change_set):
        platform = fake_platform(check_runs=[CheckRun("e2e", "in_progress")])
        assert check_gates(platform, make_change_set()).reason == "Required checks pending: e2e"

    def test_skipped_when_not_required(self, fake_platform, make_change_set):
        platform = fake_platform(check_runs=[CheckRun("ci", "completed", "failure")])
        report = check_gates(platform, make_change_set(), Settings(require_status_checks=False))
        assert report.passed is True
        assert "list_check_runs" not in platform.call_names


class TestReviewsGate:
    def test_no_reviews_pass(self, fake_platform, make_change_set):
        assert check_gates(fake_platform(), make_change_set()).passed is True

    def test_reviews_without_approval(self, fake_platform, make_change_set):
        platform = fake_platform(reviews=["COMMENTED", "CHANGES_REQUESTED"])
        assert check_gates(platform, make_change_set()).reason == "Required reviews not completed"

    def test_any_approval_passes(self, fake_platform, make_change_set):
        platform = fake_platform(reviews=["CHANGES_REQUESTED", "APPROVED"])
        assert check_gates(platform, make_change_set()).passed is True


class TestGateFailureMode:
    def test_fail_open_on_query_error(self, fake_platform, make_change_set):
        platform = fake_platform(fail=["list_check_runs"])
        report = check_gates(platform, make_change_set())
        assert report.passed is True
        errored = [r for r in report.results if r.errored]
        assert [r.gate for r in errored] == ["status-checks"]
        # later gates still run
        assert report.results[-1].gate == "reviews"

    def test_fail_closed_on_query_error(self, fake_platform, make_change_set):
        platform = fake_platform(fail=["list_check_runs"])
        report = check_gates(platform, make_change_set(), Settings(gate_failure_mode="closed"))
        assert report.passed is False
        assert report.failure.errored is True
        assert report.reason.startswith("Could not verify status-checks")

    def test_fail_open_on_pr_refresh_error(self, fake_platform, make_change_set):
        platform = fake_platform(fail=["get_change_set"])
        report = check_gates(platform, make_change_set())
        assert report.passed is True
        assert report.change_set.head_sha == "head111"

    def test_unexpected_query_error_is_fail_open(self, fake_platform, make_change_set):
        platform = fake_platform(errors={"list_review_states": TimeoutError("read timed out")})
        report = check_gates(platform, make_change_set())
        assert report.passed is True
        assert report.results[-1].errored is True
        assert "read timed out" in report.results[-1].reason

    def test_broken_gate_fails_even_when_open(self, fake_platform, make_change_set):
        platform = fake_platform()
        platform.list_check_runs = lambda sha: None
        report = check_gates(platform, make_change_set())
        assert report.passed is False
        assert report.failure.gate == "status-checks"
        assert report.failure.errored is True
        assert report.reason == "Gate status-checks raised an internal error"
