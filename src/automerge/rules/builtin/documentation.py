"""Documentation-only changes."""

import re

from automerge.changes.models import ChangeSet
from automerge.rules.builtin.dependencies import is_manifest
from automerge.rules.models import Heuristic

_DOC_EXT_RE = re.compile(r"\.(md|txt|rst|adoc)$", re.IGNORECASE)


def is_documentation(path: str) -> bool:
    if is_manifest(path):  # requirements.txt
        return False
    return bool(_DOC_EXT_RE.search(path)) or path.startswith(("docs/", "README"))


def _all_docs(change_set: ChangeSet) -> bool:
    return all(is_documentation(f.path) for f in change_set.files)


DOCUMENTATION_ONLY = Heuristic(
    id="documentation-only",
    name="Documentation only",
    description="Every changed file is documentation (.md/.txt/.rst/.adoc, docs/, README*).",
    predicate=_all_docs,
)

ALL_DOC_HEURISTICS = [DOCUMENTATION_ONLY]
