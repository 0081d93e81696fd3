"""
commitwise — staged-change verification for pre-commit review.

Package root. Keeps the import-time surface small: no config loading and no
logging setup happen on import.

Public entry point
- ``verify_staged_changes(repo_root, settings)`` returns a ``CheckResult``.
- ``review_staged_change(result, diff, context, scanner=...)`` hands that
  result to the model collaborators.
"""

from __future__ import annotations

from commitwise.checks.models import CheckCommand, CheckKind, CheckResult
from commitwise.collaborators import ReviewOutcome, review_staged_change
from commitwise.errors import CommitwiseError, IsolationError
from commitwise.verification import verify_staged_changes

__version__ = "0.3.0"

__all__ = [
    "CheckCommand",
    "CheckKind",
    "CheckResult",
    "CommitwiseError",
    "IsolationError",
    "ReviewOutcome",
    "__version__",
    "review_staged_change",
    "verify_staged_changes",
]
