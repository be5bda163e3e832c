"""Exception hierarchy.

Every error below is recovered inside the engine except where noted:

- ``ConfigError``      -> default configuration is used
- ``GateCheckError``   -> the gate passes (fail-open) unless configured closed
- ``ScorerError``      -> the risk gate is skipped
- ``ExecutionError``   -> surfaced as a failed ``ExecutionOutcome``
- ``PostActionError``  -> logged, the merge still counts as a success
"""

from __future__ import annotations


class AutomergeError(Exception):
    """Base exception for all automerge errors."""


class ConfigError(AutomergeError):
    """Raised when a rule document is malformed or unreadable."""


class PlatformError(AutomergeError):
    """Raised by a hosting platform adapter when an API call fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class GateCheckError(AutomergeError):
    """Raised when a platform gate cannot query the state it needs."""


class ScorerError(AutomergeError):
    """Raised when the external risk scorer fails or returns garbage."""


class ExecutionError(AutomergeError):
    """Raised when approval or the merge call itself fails."""


class PostActionError(AutomergeError):
    """Raised when a best-effort step after a successful merge fails."""
