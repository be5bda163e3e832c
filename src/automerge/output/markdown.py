"""Markdown bodies posted to the platform — review, commit message, comments."""

from __future__ import annotations

from typing import List, Optional

from automerge.changes.models import ChangeSet
from automerge.engine.models import RISK_CATEGORIES, RiskAssessment

_CATEGORY_LABELS = {
    "security": "Security",
    "breaking": "Breaking Changes",
    "complexity": "Complexity",
    "testing": "Testing",
    "documentation": "Documentation",
}


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def risk_report(risk: RiskAssessment, threshold: Optional[float] = None) -> str:
    score = f"**Risk Score:** {_pct(risk.risk_score)}"
    if threshold is not None:
        score += f" (threshold {_pct(threshold)})"
    parts = ["## 🤖 AI Analysis", "", score, f"**Summary:** {risk.summary}", ""]
    if risk.concerns:
        parts += ["**Concerns:**", _bullets(risk.concerns), ""]
    if risk.recommendations:
        parts += ["**Recommendations:**", _bullets(risk.recommendations), ""]
    parts.append("**Categories:**")
    parts += [
        f"- {_CATEGORY_LABELS[c]}: {_pct(risk.categories.get(c, 0.0))}" for c in RISK_CATEGORIES
    ]
    return "\n".join(parts)


def approval_body(
    reason: str,
    risk: Optional[RiskAssessment] = None,
    threshold: Optional[float] = None,
) -> str:
    body = (
        "✅ **Automerge** approved this PR\n\n"
        f"**Reason:** {reason}\n\n"
        "This PR meets the criteria for automatic merging based on your configured rules."
    )
    if risk is not None:
        body += "\n\n" + risk_report(risk, threshold)
    return body


def commit_title(change_set: ChangeSet) -> str:
    return f"{change_set.title} (#{change_set.number})"


def commit_message(reason: str, risk: Optional[RiskAssessment] = None) -> str:
    message = f"Automatically merged by Automerge\n\nReason: {reason}"
    if risk is not None:
        message += f"\nRisk score: {_pct(risk.risk_score)}\nRisk summary: {risk.summary}"
    return message


def success_comment(method: str, reason: str) -> str:
    return (
        "🎉 **PR Successfully Merged!**\n\n"
        "This PR was automatically merged by Automerge.\n\n"
        f"**Merge Method:** {method}\n"
        f"**Reason:** {reason}\n\n"
        "If you have any questions about this automation, check your `.automerge.yml`."
    )


def failure_comment(error: str) -> str:
    return (
        "❌ **Auto-merge Failed**\n\n"
        "Automerge was unable to merge this PR automatically.\n\n"
        f"**Error:** {error}\n\n"
        "Please review the PR manually or check your `.automerge.yml`."
    )
