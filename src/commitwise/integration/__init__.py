"""Git integration: plumbing wrapper and staged-change isolation."""

from commitwise.integration.git import CommandResult, GitCommandError, GitRunner
from commitwise.integration.worktree import IsolatedWorkspace, WorktreeIsolator

__all__ = [
    "CommandResult",
    "GitCommandError",
    "GitRunner",
    "IsolatedWorkspace",
    "WorktreeIsolator",
]
