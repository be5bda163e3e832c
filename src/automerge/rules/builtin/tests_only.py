"""Test-only changes."""

from automerge.changes.models import ChangeSet
from automerge.rules.models import Heuristic


def is_test_file(path: str) -> bool:
    return "test" in path or "spec" in path or path.startswith("__tests__/")


TEST_ONLY = Heuristic(
    id="test-only",
    name="Test only",
    description="Every changed file path mentions test or spec, or lives under __tests__/.",
    predicate=lambda cs: all(is_test_file(f.path) for f in cs.files),
)

ALL_TEST_HEURISTICS = [TEST_ONLY]
