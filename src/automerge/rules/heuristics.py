"""Built-in heuristic evaluator — first satisfied heuristic wins."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from automerge.changes.models import ChangeSet
from automerge.rules.models import Heuristic

logger = logging.getLogger(__name__)

NO_MATCH_REASON = "no-matching-rules"


def evaluate_builtin(
    change_set: ChangeSet,
    heuristics: Optional[Sequence[Heuristic]] = None,
) -> Optional[Heuristic]:
    """Return the first heuristic that applies to *change_set*, or None."""
    if heuristics is None:
        from automerge.rules.builtin import ALL_BUILTIN_HEURISTICS

        heuristics = ALL_BUILTIN_HEURISTICS

    for heuristic in heuristics:
        if heuristic.applies(change_set):
            logger.info("PR #%s qualifies as %s", change_set.number, heuristic.id)
            return heuristic
    logger.info("PR #%s does not match automerge criteria", change_set.number)
    return None
