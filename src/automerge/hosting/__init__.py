"""Hosting platform interface, GitHub adapter, and pre-merge gates."""

from automerge.hosting.base import BranchProtection, CheckRun, Platform, StatusState
from automerge.hosting.gates import GateReport, GateResult, check_gates

__all__ = [
    "BranchProtection",
    "CheckRun",
    "GateReport",
    "GateResult",
    "Platform",
    "StatusState",
    "check_gates",
]
