"""Built-in heuristics — aggregate all categories, in evaluation order."""

from automerge.rules.builtin.config_files import ALL_CONFIG_HEURISTICS
from automerge.rules.builtin.dependencies import ALL_DEPENDENCY_HEURISTICS
from automerge.rules.builtin.documentation import ALL_DOC_HEURISTICS
from automerge.rules.builtin.tests_only import ALL_TEST_HEURISTICS
from automerge.rules.models import Heuristic

ALL_BUILTIN_HEURISTICS: list[Heuristic] = [
    *ALL_DOC_HEURISTICS,
    *ALL_CONFIG_HEURISTICS,
    *ALL_TEST_HEURISTICS,
    *ALL_DEPENDENCY_HEURISTICS,
]

__all__ = ["ALL_BUILTIN_HEURISTICS"]
