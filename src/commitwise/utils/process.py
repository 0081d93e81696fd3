"""
commitwise — subprocess execution

Purpose
- Run external programs (package managers, check tools) as argv lists and
  normalize the outcome into one value type.

Functional requirements
- Never use a shell. Arguments reach the program literally.
- Launch failures and timeouts are reported in the outcome, never raised.
- The child environment is passed explicitly by the caller.

Non-functional requirements
- Standard library only; deterministic text decoding (UTF-8, replacement).
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """Normalized subprocess result."""

    argv: tuple[str, ...]
    cwd: Path
    exit_code: int | None
    stdout: str
    stderr: str
    duration_ms: int = 0
    timed_out: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Success means the process launched, finished, and exited with exactly 0."""

        return not self.timed_out and self.error is None and self.exit_code == 0

    def combined_output(self) -> str:
        """stdout followed by stderr, then any launch or timeout diagnostic."""

        text = f"{self.stdout}{self.stderr}".strip()
        if self.error is None:
            return text
        return "\n".join(part for part in (text, self.error.strip()) if part)


class CommandRunner(Protocol):
    """Injectable command runner used for deterministic/offline testing."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> CommandOutcome: ...


class SubprocessCommandRunner:
    """Default command runner backed by ``subprocess.run``."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> CommandOutcome:
        command = tuple(argv)
        if not command:
            raise ValueError("argv must not be empty")

        started_ns = time.monotonic_ns()
        try:
            completed = subprocess.run(
                list(command),
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return CommandOutcome(
                argv=command,
                cwd=cwd,
                exit_code=None,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
                duration_ms=_elapsed_ms(started_ns),
                timed_out=True,
                error=f"command timed out after {timeout_seconds} seconds: {' '.join(command)}",
            )
        except OSError as exc:
            return CommandOutcome(
                argv=command,
                cwd=cwd,
                exit_code=None,
                stdout="",
                stderr="",
                duration_ms=_elapsed_ms(started_ns),
                error=f"failed to launch {command[0]!r}: {exc}",
            )

        return CommandOutcome(
            argv=command,
            cwd=cwd,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_ms=_elapsed_ms(started_ns),
        )


def _as_text(value: str | bytes | None) -> str:
    # TimeoutExpired keeps partial output as bytes even when text=True was requested.
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _elapsed_ms(started_ns: int) -> int:
    return max(0, (time.monotonic_ns() - started_ns) // 1_000_000)


__all__ = ["CommandOutcome", "CommandRunner", "SubprocessCommandRunner"]
