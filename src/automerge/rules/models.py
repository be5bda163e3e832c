"""Built-in heuristic model — declarative fallback policies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from automerge.changes.models import ChangeSet


@dataclass(frozen=True)
class Heuristic:
    """A fallback policy consulted when no configured rule matches.

    ``id`` doubles as the decision reason reported to the user.
    """

    id: str
    name: str
    description: str
    predicate: Callable[[ChangeSet], bool]

    def applies(self, change_set: ChangeSet) -> bool:
        # every heuristic needs at least one file to vouch for
        return bool(change_set.files) and self.predicate(change_set)
