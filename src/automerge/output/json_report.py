"""JSON reporter for CI pipelines and webhook hosts."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from automerge.config.schema import Rule
from automerge.output.terminal import verdict
from automerge.service import ProcessResult


def _rule(rule: Optional[Rule]) -> Optional[Dict[str, Any]]:
    if rule is None:
        return None
    return {
        "name": rule.name,
        "mergeMethod": rule.actions.merge_method,
        "autoApprove": rule.actions.auto_approve,
        "deleteBranch": rule.actions.delete_branch,
    }


def to_dict(result: ProcessResult) -> Dict[str, Any]:
    """Convert a ProcessResult to a JSON-serialisable dict."""
    evaluation = result.evaluation
    data: Dict[str, Any] = {
        "version": "1.0",
        "verdict": verdict(result),
        "evaluation": {
            "shouldMerge": evaluation.should_merge,
            "reason": evaluation.reason,
            "rule": _rule(evaluation.rule),
            **({"risk": evaluation.risk.to_dict()} if evaluation.risk else {}),
        },
        "cancelled": result.cancelled,
        "dryRun": result.dry_run,
    }
    if result.gates is not None:
        data["gates"] = {
            "passed": result.gates.passed,
            "results": [
                {"gate": g.gate, "passed": g.passed, "reason": g.reason, "errored": g.errored}
                for g in result.gates.results
            ],
        }
    if result.outcome is not None:
        outcome = result.outcome
        data["outcome"] = {
            "success": outcome.success,
            "state": outcome.state.value,
            "steps": list(outcome.steps),
            **({"error": outcome.error} if outcome.error else {}),
            **({"mergeSha": outcome.merge_sha} if outcome.merge_sha else {}),
            **({"warnings": list(outcome.warnings)} if outcome.warnings else {}),
        }
    return data


def render(result: ProcessResult) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result), indent=2)
