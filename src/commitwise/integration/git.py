"""Thin, deterministic wrapper around the git plumbing used for isolation."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from commitwise.errors import CommitwiseError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class GitCommandError(CommitwiseError):
    """Raised when a git subprocess command exits non-zero."""

    def __init__(
        self,
        *,
        command: Sequence[str],
        returncode: int,
        stdout: str,
        stderr: str,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        message = f"git command failed ({returncode}): {' '.join(command)}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Normalized git subprocess result."""

    command: tuple[str, ...]
    cwd: str
    returncode: int
    stdout: str
    stderr: str


class GitRunner:
    """Run git against one repository with a caller-supplied environment."""

    def __init__(
        self,
        repo_path: Path,
        *,
        environ: Mapping[str, str] | None = None,
        git_executable: str = "git",
    ) -> None:
        self.repo_path = Path(repo_path)
        self._environ = dict(environ) if environ is not None else None
        self._git_executable = git_executable

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        check: bool = True,
    ) -> CommandResult:
        command = (self._git_executable, *args)
        run_cwd = (cwd if cwd is not None else self.repo_path).resolve()
        # No explicit environment means the current process environment, as git would see it.
        env = dict(self._environ) if self._environ is not None else dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"

        try:
            completed = subprocess.run(
                command,
                cwd=run_cwd,
                env=env,
                text=True,
                encoding="utf-8",
                errors="replace",
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise GitCommandError(
                command=command,
                returncode=-1,
                stdout="",
                stderr=f"failed to launch git: {exc}",
            ) from exc

        result = CommandResult(
            command=command,
            cwd=run_cwd.as_posix(),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if check and result.returncode != 0:
            raise GitCommandError(
                command=result.command,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        return result

    def toplevel(self) -> Path:
        """Absolute path of the working tree root that contains ``repo_path``."""

        return Path(self.run(["rev-parse", "--show-toplevel"]).stdout.strip())

    def write_staged_diff(self, patch_path: Path) -> None:
        """Write the index against HEAD to ``patch_path`` as a patch ``git apply`` can replay.

        Git writes the file itself so non-UTF-8 content survives byte for byte.
        Paths stay relative to the repository root even when ``diff.relative`` is
        set and ``repo_path`` is a subdirectory.
        """

        self.run(
            [
                "diff",
                "--cached",
                "--binary",
                "--no-color",
                "--no-ext-diff",
                "--no-relative",
                "--src-prefix=a/",
                "--dst-prefix=b/",
                f"--output={patch_path}",
            ],
        )

    def add_detached_worktree(self, path: Path, ref: str = "HEAD") -> CommandResult:
        return self.run(["worktree", "add", "--detach", str(path), ref])

    def apply_patch(self, worktree: Path, patch_path: Path) -> CommandResult:
        """Apply ``patch_path`` inside ``worktree``. The caller inspects the return code."""

        return self.run(
            ["apply", "--whitespace=nowarn", str(patch_path)],
            cwd=worktree,
            check=False,
        )

    def remove_worktree(self, path: Path) -> None:
        """Deregister ``path`` and prune stale registrations. Failures are ignored."""

        self.run(["worktree", "remove", "--force", str(path)], check=False)
        self.run(["worktree", "prune"], check=False)


__all__ = ["CommandResult", "GitCommandError", "GitRunner"]
