"""Rule resolver — first enabled rule whose condition groups all hold wins."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from automerge.changes.models import ChangeSet
from automerge.config.schema import Rule, RuleConfig
from automerge.rules.matcher import match, match_any

if TYPE_CHECKING:
    from automerge.engine.models import RiskAssessment

logger = logging.getLogger(__name__)


def is_team_pattern(pattern: str) -> bool:
    """``@org/team`` patterns need a membership lookup we do not perform."""
    return pattern.startswith("@") and "/" in pattern


def author_matches(author: str, patterns: List[str]) -> bool:
    """OR over patterns. Team patterns never match (conservative skip)."""
    for pattern in patterns:
        if is_team_pattern(pattern):
            logger.debug("Skipping team pattern %s: membership is not resolved", pattern)
            continue
        if match(author, pattern):
            return True
    return False


def any_file_matches(paths: List[str], patterns: List[str]) -> bool:
    return any(match_any(path, patterns) for path in paths)


def rule_matches(
    rule: Rule,
    change_set: ChangeSet,
    assessment: Optional["RiskAssessment"] = None,
) -> bool:
    """AND over the condition groups present on *rule*."""
    cond = rule.conditions
    paths = change_set.paths

    if cond.author_patterns is not None and not author_matches(
        change_set.author, cond.author_patterns
    ):
        logger.debug("Rule %s: author %s doesn't match patterns", rule.name, change_set.author)
        return False

    if cond.file_patterns is not None and not any_file_matches(paths, cond.file_patterns):
        logger.debug("Rule %s: no files match patterns", rule.name)
        return False

    if cond.block_patterns is not None and any_file_matches(paths, cond.block_patterns):
        logger.debug("Rule %s: files match block patterns", rule.name)
        return False

    if (
        cond.max_risk_score is not None
        and assessment is not None
        and assessment.risk_score > cond.max_risk_score
    ):
        logger.debug(
            "Rule %s: risk %.2f above maxRiskScore %.2f",
            rule.name, assessment.risk_score, cond.max_risk_score,
        )
        return False

    return True


def resolve(
    config: RuleConfig,
    change_set: ChangeSet,
    assessment: Optional["RiskAssessment"] = None,
) -> Optional[Rule]:
    """Return the first enabled rule (declaration order) matching *change_set*."""
    for rule in config.enabled_rules():
        if rule_matches(rule, change_set, assessment):
            logger.info("Rule %s matches PR #%s", rule.name, change_set.number)
            return rule
    return None
