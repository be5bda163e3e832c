"""Merge executor state machine."""

from automerge.executor.merge import ExecutionOutcome, MergeExecutor, MergeState

__all__ = ["ExecutionOutcome", "MergeExecutor", "MergeState"]
