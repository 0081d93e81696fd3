"""
commitwise — dependency provisioning for isolated workspaces

Purpose
- Make a project's third-party dependencies available inside an isolated
  copy before a check runs there.

Functional requirements
- Reuse the original checkout's dependency tree through a symlink when one
  exists; the original tree is never modified.
- Otherwise install with the detected package manager, reproducibly when a
  matching lockfile is present.
- A failed link is a warning, not an error. A failed install is reported in
  the outcome, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from commitwise.constants import DEPENDENCY_DIR_NAME, MANIFEST_FILENAME
from commitwise.project.package_manager import (
    PackageManager,
    detect_package_manager,
    find_lockfile,
    install_command,
)
from commitwise.utils.fs import link_directory
from commitwise.utils.process import CommandRunner, SubprocessCommandRunner

logger = logging.getLogger(__name__)


class ProvisionStatus(StrEnum):
    """How the isolated copy obtained (or failed to obtain) its dependencies."""

    PRESENT = "present"
    LINKED = "linked"
    INSTALLED = "installed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ProvisionOutcome:
    status: ProvisionStatus
    package_manager: PackageManager | None = None
    command: tuple[str, ...] | None = None
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not ProvisionStatus.FAILED


class DependencyProvisioner:
    """Link or install dependencies into an isolated project directory."""

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        environ: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
        link_dependencies: bool = True,
        install_dependencies: bool = True,
    ) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0 when provided")
        self._runner: CommandRunner = runner if runner is not None else SubprocessCommandRunner()
        self._environ = dict(environ) if environ is not None else None
        self._timeout_seconds = timeout_seconds
        self._link_dependencies = link_dependencies
        self._install_dependencies = install_dependencies

    def provision(self, workspace_dir: Path, original_root: Path) -> ProvisionOutcome:
        isolated_tree = workspace_dir / DEPENDENCY_DIR_NAME
        original_tree = original_root / DEPENDENCY_DIR_NAME

        if isolated_tree.exists():
            logger.debug("dependency tree already present in %s", workspace_dir)
            return ProvisionOutcome(status=ProvisionStatus.PRESENT)

        if self._link_dependencies and original_tree.is_dir():
            try:
                link_directory(isolated_tree, original_tree)
            except OSError as exc:
                logger.warning(
                    "could not link %s into the isolated copy, falling back to install: %s",
                    original_tree,
                    exc,
                )
            else:
                logger.debug("linked %s -> %s", isolated_tree, original_tree)
                return ProvisionOutcome(status=ProvisionStatus.LINKED)

        if not (workspace_dir / MANIFEST_FILENAME).is_file():
            logger.debug("no %s in %s; nothing to install", MANIFEST_FILENAME, workspace_dir)
            return ProvisionOutcome(status=ProvisionStatus.SKIPPED)
        if not self._install_dependencies:
            logger.debug("dependency install disabled; continuing without %s", DEPENDENCY_DIR_NAME)
            return ProvisionOutcome(status=ProvisionStatus.SKIPPED)

        return self._install(workspace_dir)

    def _install(self, workspace_dir: Path) -> ProvisionOutcome:
        manager = detect_package_manager(workspace_dir)
        frozen = find_lockfile(workspace_dir, manager) is not None
        argv = install_command(manager, frozen=frozen)
        logger.debug("installing dependencies with %s", " ".join(argv))

        outcome = self._runner.run(
            argv,
            cwd=workspace_dir,
            env=self._environ,
            timeout_seconds=self._timeout_seconds,
        )
        status = ProvisionStatus.INSTALLED if outcome.ok else ProvisionStatus.FAILED
        if status is ProvisionStatus.FAILED:
            logger.debug(
                "dependency install failed (exit=%s, timed_out=%s)",
                outcome.exit_code,
                outcome.timed_out,
            )
        return ProvisionOutcome(
            status=status,
            package_manager=manager,
            command=argv,
            output=outcome.combined_output(),
        )


__all__ = ["DependencyProvisioner", "ProvisionOutcome", "ProvisionStatus"]
