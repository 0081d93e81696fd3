"""
commitwise — staged-change verification

Purpose
- Answer "does the staged change still pass the project's best check?"
  without touching the user's checkout.

Stages
- selecting: pick the highest-confidence check; none available ends the call
  with a not-run result.
- isolating: reproduce HEAD plus the staged diff in a throwaway worktree;
  failure raises ``IsolationError``.
- provisioning: link or install dependencies; failure is a failed result.
- executing: run the check in the isolated copy.

The isolated workspace is torn down on every exit once it exists.
"""

from __future__ import annotations

import logging
from pathlib import Path

from commitwise.checks.executor import CheckExecutor
from commitwise.checks.models import CheckCommand, CheckResult
from commitwise.checks.selector import select_check
from commitwise.config.settings import VerificationSettings
from commitwise.integration.worktree import WorktreeIsolator
from commitwise.sandbox.dependency_provisioner import DependencyProvisioner

logger = logging.getLogger(__name__)


class StagedChangeVerifier:
    """Run the selected check against exactly what would be committed."""

    def __init__(
        self,
        repo_root: Path,
        settings: VerificationSettings | None = None,
        *,
        isolator: WorktreeIsolator | None = None,
        provisioner: DependencyProvisioner | None = None,
        executor: CheckExecutor | None = None,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.settings = settings if settings is not None else VerificationSettings()
        self._isolator = isolator or WorktreeIsolator(
            self.repo_root,
            temp_root=self.settings.temp_root,
            environ=self.settings.environ,
        )
        self._provisioner = provisioner or DependencyProvisioner(
            environ=self.settings.environ,
            timeout_seconds=self.settings.install_timeout_seconds,
            link_dependencies=self.settings.link_dependencies,
            install_dependencies=self.settings.install_dependencies,
        )
        self._executor = executor or CheckExecutor(
            environ=self.settings.environ,
            timeout_seconds=self.settings.check_timeout_seconds,
        )

    def verify(self) -> CheckResult:
        logger.debug("stage=selecting repo=%s", self.repo_root)
        selection = select_check(self.repo_root)
        if selection.selected is None:
            logger.debug("stage=none_available")
            return CheckResult.not_run()
        return self._verify_isolated(selection.selected)

    def _verify_isolated(self, command: CheckCommand) -> CheckResult:
        logger.debug("stage=selected check=%r kind=%s", command.name, command.kind.value)

        logger.debug("stage=isolating")
        with self._isolator.isolate() as workspace:
            logger.debug(
                "stage=isolated dir=%s patch_applied=%s",
                workspace.project_dir,
                workspace.patch_applied,
            )

            logger.debug("stage=provisioning")
            provisioned = self._provisioner.provision(workspace.project_dir, self.repo_root)
            if not provisioned.ok:
                logger.debug("stage=provision_failed command=%s", provisioned.command)
                return CheckResult.completed(command, ok=False, output=provisioned.output)
            logger.debug("stage=provisioned status=%s", provisioned.status.value)

            logger.debug("stage=executing")
            result = self._executor.execute(command, workspace.project_dir)
        logger.debug("stage=done ok=%s", result.ok)
        return result


def verify_staged_changes(
    repo_root: Path,
    settings: VerificationSettings | None = None,
    *,
    isolator: WorktreeIsolator | None = None,
    provisioner: DependencyProvisioner | None = None,
    executor: CheckExecutor | None = None,
) -> CheckResult:
    """Verify the staged change in ``repo_root`` with its most trustworthy check.

    Returns a not-run result when the project offers no check, a failed result
    when dependencies could not be installed or the check failed, and raises
    ``IsolationError`` when the staged change cannot be reproduced.
    """

    verifier = StagedChangeVerifier(
        repo_root,
        settings,
        isolator=isolator,
        provisioner=provisioner,
        executor=executor,
    )
    return verifier.verify()


__all__ = ["StagedChangeVerifier", "verify_staged_changes"]
