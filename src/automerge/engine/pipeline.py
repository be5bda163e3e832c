"""Evaluation pipeline — ordered stages, first ``Resolved`` wins.

Stage order:

1. risk gate        (only with ``settings.ai_analysis`` and an assessment)
2. configured rules
3. built-in heuristics
4. fallback         (``no-matching-rules``)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from automerge.changes.models import ChangeSet
from automerge.config.schema import RuleConfig
from automerge.engine.models import CONTINUE, EvaluationResult, Resolved, RiskAssessment, StageOutcome
from automerge.engine.risk import is_vetoed, veto_reason
from automerge.rules.heuristics import NO_MATCH_REASON, evaluate_builtin
from automerge.rules.resolver import resolve

logger = logging.getLogger(__name__)

EVALUATION_ERROR_REASON = "evaluation-error"


@dataclass(frozen=True)
class EvaluationContext:
    config: RuleConfig
    change_set: ChangeSet
    risk: Optional[RiskAssessment] = None


Stage = Callable[[EvaluationContext], StageOutcome]


def risk_gate_stage(ctx: EvaluationContext) -> StageOutcome:
    if ctx.risk is None or not is_vetoed(ctx.risk):
        return CONTINUE
    logger.info("PR #%s vetoed by risk analysis (score %.2f)", ctx.change_set.number, ctx.risk.risk_score)
    return Resolved(EvaluationResult(False, veto_reason(ctx.risk), risk=ctx.risk))


def rule_stage(ctx: EvaluationContext) -> StageOutcome:
    rule = resolve(ctx.config, ctx.change_set, ctx.risk)
    if rule is None:
        return CONTINUE
    if not rule.actions.auto_merge:
        return Resolved(
            EvaluationResult(False, f"{rule.name}: auto-merge disabled", rule=rule, risk=ctx.risk)
        )
    return Resolved(EvaluationResult(True, rule.name, rule=rule, risk=ctx.risk))


def heuristic_stage(ctx: EvaluationContext) -> StageOutcome:
    heuristic = evaluate_builtin(ctx.change_set)
    if heuristic is None:
        return CONTINUE
    return Resolved(EvaluationResult(True, heuristic.id, risk=ctx.risk))


def fallback_stage(ctx: EvaluationContext) -> StageOutcome:
    return Resolved(EvaluationResult(False, NO_MATCH_REASON, risk=ctx.risk))


DEFAULT_STAGES: Tuple[Stage, ...] = (
    risk_gate_stage,
    rule_stage,
    heuristic_stage,
    fallback_stage,
)


def run_stages(ctx: EvaluationContext, stages: Sequence[Stage]) -> EvaluationResult:
    for stage in stages:
        outcome = stage(ctx)
        if isinstance(outcome, Resolved):
            logger.debug("Stage %s resolved: %s", stage.__name__, outcome.result.reason)
            return outcome.result
    return EvaluationResult(False, NO_MATCH_REASON, risk=ctx.risk)


def evaluate(
    config: RuleConfig,
    change_set: ChangeSet,
    risk: Optional[RiskAssessment] = None,
    *,
    stages: Sequence[Stage] = DEFAULT_STAGES,
) -> EvaluationResult:
    """Decide whether *change_set* qualifies for auto-merge.

    *risk* is ignored unless ``config.settings.ai_analysis`` is enabled.
    Never raises: an unexpected fault yields ``evaluation-error``.
    """
    if risk is not None and not config.settings.ai_analysis:
        logger.debug("Ignoring risk assessment: aiAnalysis is disabled")
        risk = None

    logger.info("Evaluating automerge rules for PR #%s", change_set.number)
    try:
        return run_stages(EvaluationContext(config, change_set, risk), stages)
    except Exception:  # noqa: BLE001
        logger.exception("Error evaluating automerge rules for PR #%s", change_set.number)
        return EvaluationResult(False, EVALUATION_ERROR_REASON)
