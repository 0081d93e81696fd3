"""
commitwise — staged-change isolation

Purpose
- Reproduce exactly what would be committed (HEAD plus the staged diff) in a
  throwaway git worktree, without touching the user's branch, index, or
  working tree.

Functional requirements
- Each call gets its own uniquely named temporary directory holding the
  detached worktree and the captured patch.
- The temporary root is an absolute path outside the repository; a root
  inside it is rejected before anything is created.
- Any failure while reproducing the staged change removes what was created
  and raises ``IsolationError`` naming the failing stage.
- Cleanup deregisters the worktree, removes the temporary directory, never
  raises, and may be called any number of times.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from commitwise.constants import PATCH_FILENAME, TEMP_DIR_PREFIX, WORKTREE_DIRNAME
from commitwise.errors import IsolationError
from commitwise.integration.git import GitCommandError, GitRunner
from commitwise.utils.fs import remove_tree

logger = logging.getLogger(__name__)

_UNREPRODUCIBLE = "the staged change could not be reproduced for testing"


@dataclass(frozen=True, slots=True)
class IsolatedWorkspace:
    """Ephemeral checkout of HEAD with the staged diff applied.

    ``project_dir`` is the counterpart of the requested repository root inside
    the worktree; it differs from ``worktree_dir`` when the project lives in a
    subdirectory of the git repository.
    """

    base_dir: Path
    worktree_dir: Path
    patch_path: Path
    project_dir: Path
    patch_applied: bool


class _WorkspaceCleanup:
    """Idempotent teardown for one isolated workspace."""

    def __init__(self, git: GitRunner, base_dir: Path, worktree_dir: Path) -> None:
        self._git = git
        self._base_dir = base_dir
        self._worktree_dir = worktree_dir
        self._registered = False
        self._done = False

    def mark_registered(self) -> None:
        self._registered = True

    def __call__(self) -> None:
        if self._done:
            return
        self._done = True

        if self._registered:
            try:
                self._git.remove_worktree(self._worktree_dir)
            except Exception as exc:  # noqa: BLE001 - cleanup never raises
                logger.warning("failed to deregister worktree %s: %s", self._worktree_dir, exc)
        try:
            remove_tree(self._base_dir, owner=self._base_dir.parent)
        except Exception as exc:  # noqa: BLE001 - cleanup never raises
            logger.warning("failed to remove temporary directory %s: %s", self._base_dir, exc)
        logger.debug("isolated workspace %s cleaned up", self._base_dir)


class WorktreeIsolator:
    """Create isolated copies of a repository's staged state."""

    def __init__(
        self,
        repo_root: Path,
        *,
        git: GitRunner | None = None,
        temp_root: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.repo_root = Path(repo_root)
        self._git = git if git is not None else GitRunner(self.repo_root, environ=environ)
        self._temp_root = (
            Path(temp_root).expanduser().resolve(strict=False) if temp_root is not None else None
        )

    def create(self) -> tuple[IsolatedWorkspace, Callable[[], None]]:
        """Build the isolated workspace and return it with its cleanup callable."""

        try:
            toplevel = self._git.toplevel().resolve(strict=False)
        except GitCommandError as exc:
            raise IsolationError(
                f"{_UNREPRODUCIBLE}: {self.repo_root} is not inside a git working tree",
                stage="worktree",
                stderr=exc.stderr,
            ) from exc

        temp_root = (
            self._temp_root
            if self._temp_root is not None
            else Path(tempfile.gettempdir()).resolve(strict=False)
        )
        if temp_root == toplevel or toplevel in temp_root.parents:
            raise IsolationError(
                f"{_UNREPRODUCIBLE}: temporary directory {temp_root} is inside the "
                f"repository {toplevel}",
                stage="tempdir",
            )

        try:
            temp_root.mkdir(parents=True, exist_ok=True)
            base_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=str(temp_root)))
        except OSError as exc:
            raise IsolationError(
                f"{_UNREPRODUCIBLE}: could not create a temporary directory",
                stage="tempdir",
                stderr=str(exc),
            ) from exc

        worktree_dir = base_dir / WORKTREE_DIRNAME
        patch_path = base_dir / PATCH_FILENAME
        cleanup = _WorkspaceCleanup(self._git, base_dir, worktree_dir)
        logger.debug("isolating staged changes of %s in %s", self.repo_root, base_dir)

        try:
            self._git.add_detached_worktree(worktree_dir)
            cleanup.mark_registered()
        except GitCommandError as exc:
            cleanup()
            raise IsolationError(
                f"{_UNREPRODUCIBLE}: could not create a worktree at HEAD",
                stage="worktree",
                stderr=exc.stderr,
            ) from exc

        try:
            self._git.write_staged_diff(patch_path)
        except GitCommandError as exc:
            cleanup()
            raise IsolationError(
                f"{_UNREPRODUCIBLE}: could not capture the staged diff",
                stage="diff",
                stderr=exc.stderr,
            ) from exc

        patch_applied = False
        if patch_path.is_file() and patch_path.stat().st_size > 0:
            result = self._git.apply_patch(worktree_dir, patch_path)
            if result.returncode != 0:
                cleanup()
                raise IsolationError(
                    f"{_UNREPRODUCIBLE}: the staged diff did not apply cleanly",
                    stage="apply",
                    stderr=result.stderr,
                )
            patch_applied = True

        workspace = IsolatedWorkspace(
            base_dir=base_dir,
            worktree_dir=worktree_dir,
            patch_path=patch_path,
            project_dir=self._project_dir(worktree_dir, toplevel),
            patch_applied=patch_applied,
        )
        return workspace, cleanup

    @contextmanager
    def isolate(self) -> Iterator[IsolatedWorkspace]:
        workspace, cleanup = self.create()
        try:
            yield workspace
        finally:
            cleanup()

    def _project_dir(self, worktree_dir: Path, toplevel: Path) -> Path:
        requested = self.repo_root.resolve(strict=False)
        try:
            relative = requested.relative_to(toplevel)
        except ValueError:
            return worktree_dir
        return worktree_dir / relative if relative.parts else worktree_dir


__all__ = ["IsolatedWorkspace", "WorktreeIsolator"]
