"""Shared process and filesystem helpers."""

from commitwise.utils.fs import is_within, link_directory, remove_tree
from commitwise.utils.process import CommandOutcome, CommandRunner, SubprocessCommandRunner

__all__ = [
    "CommandOutcome",
    "CommandRunner",
    "SubprocessCommandRunner",
    "is_within",
    "link_directory",
    "remove_tree",
]
