"""Rule engine — glob matcher, configured-rule resolver, built-in heuristics."""

from automerge.rules.heuristics import NO_MATCH_REASON, evaluate_builtin
from automerge.rules.matcher import compile_pattern, match
from automerge.rules.models import Heuristic
from automerge.rules.resolver import resolve, rule_matches

__all__ = [
    "Heuristic",
    "NO_MATCH_REASON",
    "compile_pattern",
    "evaluate_builtin",
    "match",
    "resolve",
    "rule_matches",
]
