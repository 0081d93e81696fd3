"""
commitwise — check execution

Purpose
- Run one selected check inside an isolated copy and turn the process outcome
  into a ``CheckResult``.

Functional requirements
- The command runs as an argv list with the isolated copy as working
  directory, stdin closed, and never through a shell.
- Captured output is stdout followed by stderr, trimmed.
- Only exit status 0 counts as success. Launch failures and timeouts yield a
  failed result with the diagnostic appended to the output.
- ``execute`` never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from commitwise.checks.models import CheckCommand, CheckResult
from commitwise.utils.process import CommandRunner, SubprocessCommandRunner

logger = logging.getLogger(__name__)


class CheckExecutor:
    """Execute a selected check against an isolated workspace."""

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        environ: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0 when provided")
        self._runner: CommandRunner = runner if runner is not None else SubprocessCommandRunner()
        self._environ = dict(environ) if environ is not None else None
        self._timeout_seconds = timeout_seconds

    def execute(self, command: CheckCommand, workspace_dir: Path) -> CheckResult:
        logger.debug("executing check %r in %s", command.name, workspace_dir)
        outcome = self._runner.run(
            command.argv,
            cwd=workspace_dir,
            env=self._environ,
            timeout_seconds=self._timeout_seconds,
        )
        if outcome.ok:
            logger.debug("check %r passed in %d ms", command.name, outcome.duration_ms)
        else:
            logger.debug(
                "check %r failed (exit=%s, timed_out=%s, error=%s)",
                command.name,
                outcome.exit_code,
                outcome.timed_out,
                outcome.error,
            )
        return CheckResult.completed(command, ok=outcome.ok, output=outcome.combined_output())


__all__ = ["CheckExecutor"]
