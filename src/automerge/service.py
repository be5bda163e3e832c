"""Per-event orchestration: config, risk, evaluation, gates, execution."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from automerge.changes.models import ChangeSet
from automerge.config.defaults import CONFIG_FILENAME
from automerge.config.loader import load_from_platform
from automerge.config.schema import RuleConfig
from automerge.engine.models import EvaluationResult, RiskAssessment
from automerge.engine.pipeline import evaluate
from automerge.engine.risk import RiskScorer, obtain_assessment
from automerge.entitlements import AI_ANALYSIS, Entitlements
from automerge.executor.merge import ExecutionOutcome, MergeExecutor
from automerge.hosting.base import Platform
from automerge.hosting.gates import GateReport, check_gates

logger = logging.getLogger(__name__)

PROCESSING_ERROR_REASON = "processing-error"


@dataclass
class ProcessResult:
    evaluation: EvaluationResult
    gates: Optional[GateReport] = None
    outcome: Optional[ExecutionOutcome] = None
    cancelled: bool = False
    dry_run: bool = False

    @property
    def merged(self) -> bool:
        return self.outcome is not None and self.outcome.success


class AutomergeService:
    """Run the full decision + execution for one change-set event."""

    def __init__(
        self,
        platform: Platform,
        *,
        entitlements: Optional[Entitlements] = None,
        scorer: Optional[RiskScorer] = None,
        config_path: str = CONFIG_FILENAME,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.platform = platform
        self.entitlements = entitlements
        self.scorer = scorer
        self.config_path = config_path
        self._sleep = sleep

    def _ai_permitted(self, account_id: Optional[str]) -> bool:
        if self.entitlements is None:
            return True
        if account_id is None:
            return False
        return self.entitlements.has_feature(account_id, AI_ANALYSIS)

    def handle(
        self,
        change_set: ChangeSet,
        *,
        config: Optional[RuleConfig] = None,
        risk: Optional[RiskAssessment] = None,
        account_id: Optional[str] = None,
        dry_run: bool = False,
        cancelled: Optional[Callable[[], bool]] = None,
    ) -> ProcessResult:
        """Evaluate *change_set* and merge it when every stage agrees. Never raises."""
        try:
            return self._process(
                change_set,
                config=config,
                risk=risk,
                account_id=account_id,
                dry_run=dry_run,
                cancelled=cancelled,
            )
        except Exception:  # noqa: BLE001
            logger.exception("Processing PR #%s failed unexpectedly", change_set.number)
            return ProcessResult(
                evaluation=EvaluationResult(False, PROCESSING_ERROR_REASON),
                dry_run=dry_run,
            )

    def _process(
        self,
        change_set: ChangeSet,
        *,
        config: Optional[RuleConfig],
        risk: Optional[RiskAssessment],
        account_id: Optional[str],
        dry_run: bool,
        cancelled: Optional[Callable[[], bool]],
    ) -> ProcessResult:
        if config is None:
            config = load_from_platform(self.platform, self.config_path)

        if config.settings.ai_analysis:
            if not self._ai_permitted(account_id):
                logger.info("AI analysis not included in the plan of account %s", account_id)
                risk = None
            elif risk is None:
                risk = obtain_assessment(self.scorer, change_set)

        evaluation = evaluate(config, change_set, risk)
        result = ProcessResult(evaluation=evaluation, dry_run=dry_run)
        if not evaluation.should_merge:
            logger.info("PR #%s not eligible: %s", change_set.number, evaluation.reason)
            return result

        if cancelled is not None and cancelled():
            logger.info("PR #%s event superseded before gating, abandoning", change_set.number)
            result.cancelled = True
            return result

        result.gates = check_gates(self.platform, change_set, config.settings)
        if not result.gates.passed or dry_run:
            return result

        if cancelled is not None and cancelled():
            logger.info("PR #%s event superseded before merging, abandoning", change_set.number)
            result.cancelled = True
            return result

        executor = MergeExecutor(self.platform, config.settings, sleep=self._sleep)
        result.outcome = executor.execute(evaluation, change_set, result.gates)
        return result
