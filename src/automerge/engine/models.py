"""Decision models — risk assessment, evaluation result, pipeline stage outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from automerge.config.schema import Rule

RISK_CATEGORIES = ("security", "breaking", "complexity", "testing", "documentation")
MAX_LISTED_ITEMS = 10


def _clamp(value: Any) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(1.0, number))


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value[:MAX_LISTED_ITEMS]]


@dataclass
class RiskAssessment:
    """Output contract of the external risk scorer."""

    risk_score: float
    auto_approval_recommended: bool
    summary: str = "No summary provided"
    concerns: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    categories: Dict[str, float] = field(
        default_factory=lambda: {c: 0.0 for c in RISK_CATEGORIES}
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RiskAssessment":
        """Build from the scorer's JSON, clamping scores and trimming lists."""
        categories = data.get("categories")
        if not isinstance(categories, Mapping):
            categories = {}
        return cls(
            risk_score=_clamp(data.get("riskScore")),
            auto_approval_recommended=bool(data.get("autoApprovalRecommended")),
            summary=str(data.get("summary") or "No summary provided"),
            concerns=_str_list(data.get("concerns")),
            recommendations=_str_list(data.get("recommendations")),
            categories={c: _clamp(categories.get(c)) for c in RISK_CATEGORIES},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskScore": self.risk_score,
            "autoApprovalRecommended": self.auto_approval_recommended,
            "summary": self.summary,
            "concerns": list(self.concerns),
            "recommendations": list(self.recommendations),
            "categories": dict(self.categories),
        }


@dataclass
class EvaluationResult:
    should_merge: bool
    reason: str
    rule: Optional[Rule] = None
    risk: Optional[RiskAssessment] = None


@dataclass(frozen=True)
class Continue:
    """A stage had nothing to say; evaluation moves on to the next one."""


@dataclass(frozen=True)
class Resolved:
    """A stage decided; later stages do not run."""

    result: EvaluationResult


StageOutcome = Union[Continue, Resolved]

CONTINUE = Continue()
