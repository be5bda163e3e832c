"""Decision engine — risk gate and staged evaluation pipeline."""

from automerge.engine.models import Continue, EvaluationResult, Resolved, RiskAssessment
from automerge.engine.pipeline import DEFAULT_STAGES, EvaluationContext, evaluate
from automerge.engine.risk import VETO_THRESHOLD, is_vetoed, obtain_assessment

__all__ = [
    "DEFAULT_STAGES",
    "Continue",
    "EvaluationContext",
    "EvaluationResult",
    "Resolved",
    "RiskAssessment",
    "VETO_THRESHOLD",
    "evaluate",
    "is_vetoed",
    "obtain_assessment",
]
