"""Risk gate — optional veto by an external risk scorer.

The gate runs before rule resolution. A change the scorer does not
recommend *and* scores above ``VETO_THRESHOLD`` is rejected no matter
what the rules say. Scorer failures never block evaluation.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Union

from automerge.changes.models import ChangeSet
from automerge.engine.models import RiskAssessment
from automerge.exceptions import ScorerError

logger = logging.getLogger(__name__)

VETO_THRESHOLD = 0.7

RiskScorer = Callable[[ChangeSet], Union[RiskAssessment, Mapping[str, Any]]]


def is_vetoed(assessment: RiskAssessment) -> bool:
    return (not assessment.auto_approval_recommended) and assessment.risk_score > VETO_THRESHOLD


def veto_reason(assessment: RiskAssessment) -> str:
    return f"AI analysis: {assessment.summary}"


def obtain_assessment(
    scorer: Optional[RiskScorer],
    change_set: ChangeSet,
) -> Optional[RiskAssessment]:
    """Call *scorer*, returning None (and logging) on any scorer failure."""
    if scorer is None:
        return None
    try:
        raw = scorer(change_set)
        if isinstance(raw, RiskAssessment):
            assessment = raw
        elif isinstance(raw, Mapping):
            assessment = RiskAssessment.from_dict(raw)
        else:
            raise ScorerError(f"scorer returned {type(raw).__name__}")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Risk analysis failed, falling back to rule-based evaluation: %s", exc)
        return None

    logger.info(
        "Risk analysis for PR #%s: score %.2f, auto-approve %s",
        change_set.number, assessment.risk_score, assessment.auto_approval_recommended,
    )
    return assessment
