"""Small configuration-only changes."""

import re

from automerge.changes.models import ChangeSet
from automerge.rules.builtin.dependencies import is_manifest
from automerge.rules.models import Heuristic

_CONFIG_EXT_RE = re.compile(r"\.(yml|yaml|json|toml)$", re.IGNORECASE)

MAX_CONFIG_CHANGES = 50  # added + removed lines, exclusive


def is_config_file(path: str) -> bool:
    # manifests are judged by minor-deps only
    if is_manifest(path):
        return False
    return bool(_CONFIG_EXT_RE.search(path)) or "config" in path or path == ".gitignore"


def _small_config(change_set: ChangeSet) -> bool:
    if not all(is_config_file(f.path) for f in change_set.files):
        return False
    return change_set.total_changes < MAX_CONFIG_CHANGES


SMALL_CONFIG_CHANGES = Heuristic(
    id="small-config-changes",
    name="Small config changes",
    description=f"Only config files, fewer than {MAX_CONFIG_CHANGES} changed lines in total.",
    predicate=_small_config,
)

ALL_CONFIG_HEURISTICS = [SMALL_CONFIG_CHANGES]
