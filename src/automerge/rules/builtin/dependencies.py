"""Minor dependency updates.

A manifest-only change qualifies unless an added or removed dependency line
pins a ``X.0.0`` version, which is read as a major bump. Without a patch we
cannot tell, so a missing patch disqualifies the change.
"""

import logging
import re

from automerge.changes.models import ChangeSet, ChangedFile
from automerge.changes.patch_parser import PatchParser
from automerge.rules.models import Heuristic

logger = logging.getLogger(__name__)

_MANIFEST_RE = re.compile(
    r"(package\.json|package-lock\.json|requirements\.txt|Gemfile|go\.mod)$",
    re.IGNORECASE,
)

# "lodash": "^2.0.0"
_JSON_MAJOR_RE = re.compile(r'^\s*"[^"]+"\s*:\s*"[^\d"]*(\d+)\.0\.0')
# requests==3.0.0, gem 'rails', '~> 7.0.0', github.com/x/y v2.0.0
_PLAIN_MAJOR_RE = re.compile(r"(?:^|[\s=<>~!@'\"v^])(\d+)\.0\.0(?![\d.])")


def is_manifest(path: str) -> bool:
    return bool(_MANIFEST_RE.search(path))


def has_major_bump(file: ChangedFile) -> bool:
    if file.patch is None:
        logger.debug("No patch for %s, treating as major update", file.path)
        return True
    pattern = _JSON_MAJOR_RE if file.path.endswith(".json") else _PLAIN_MAJOR_RE
    for line in PatchParser(file.path, file.patch).changed_lines():
        if pattern.search(line.content):
            logger.info("Major version update detected in %s: %s", file.path, line.content.strip())
            return True
    return False


def _minor_deps(change_set: ChangeSet) -> bool:
    if not all(is_manifest(f.path) for f in change_set.files):
        return False
    return not any(has_major_bump(f) for f in change_set.files)


MINOR_DEPENDENCY_UPDATES = Heuristic(
    id="minor-deps",
    name="Minor dependency updates",
    description="Only dependency manifests, with no X.0.0 version added or removed.",
    predicate=_minor_deps,
)

ALL_DEPENDENCY_HEURISTICS = [MINOR_DEPENDENCY_UPDATES]
