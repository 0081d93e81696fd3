"""Exception hierarchy for commitwise.

Only isolation failures are raised out of a verification call. Provisioning
and execution failures travel inside ``CheckResult`` instead.
"""

from __future__ import annotations


class CommitwiseError(RuntimeError):
    """Base error for commitwise failures."""


class IsolationError(CommitwiseError):
    """Raised when the staged change cannot be reproduced in an isolated worktree."""

    def __init__(self, message: str, *, stage: str, stderr: str = "") -> None:
        self.stage = stage
        self.stderr = stderr
        detail = stderr.strip()
        full_message = f"{message}\n{detail}" if detail else message
        super().__init__(full_message)


__all__ = ["CommitwiseError", "IsolationError"]
