"""Configuration schema — dataclasses for the rule document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

MergeMethod = Literal["merge", "squash", "rebase"]
GateFailureMode = Literal["open", "closed"]

SUPPORTED_VERSION = "1"
MERGE_METHODS: tuple[str, ...] = ("merge", "squash", "rebase")
GATE_FAILURE_MODES: tuple[str, ...] = ("open", "closed")


@dataclass
class RuleConditions:
    """Condition groups of a rule.

    ``None`` means the group is absent and therefore vacuously satisfied.
    An empty list is present and can never be satisfied (except for
    ``block_patterns``, which then never blocks).
    """

    author_patterns: Optional[List[str]] = None
    file_patterns: Optional[List[str]] = None
    block_patterns: Optional[List[str]] = None
    max_risk_score: Optional[float] = None


@dataclass
class RuleActions:
    auto_approve: bool = True
    auto_merge: bool = False
    merge_method: MergeMethod = "squash"
    delete_branch: bool = True


@dataclass
class Rule:
    name: str
    description: str = ""
    enabled: bool = False  # a rule has to opt in
    conditions: RuleConditions = field(default_factory=RuleConditions)
    actions: RuleActions = field(default_factory=RuleActions)


@dataclass
class Settings:
    ai_analysis: bool = False
    risk_threshold: float = 0.5
    auto_delete_branches: bool = True
    require_status_checks: bool = True
    gate_failure_mode: GateFailureMode = "open"
    settle_seconds: float = 2.0


@dataclass
class RuleConfig:
    version: str = SUPPORTED_VERSION
    rules: List[Rule] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    is_default: bool = field(default=False, compare=False)

    def enabled_rules(self) -> List[Rule]:
        return [r for r in self.rules if r.enabled]
