"""Unit tests for dependency provisioning in isolated copies."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest

from commitwise.project.package_manager import PackageManager
from commitwise.sandbox.dependency_provisioner import DependencyProvisioner, ProvisionStatus
from commitwise.utils.process import CommandOutcome


class FakeRunner:
    """Records invocations and replays a scripted outcome."""

    def __init__(
        self, *, exit_code: int | None = 0, stdout: str = "", error: str | None = None
    ) -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.error = error
        self.calls: list[dict[str, object]] = []

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> CommandOutcome:
        self.calls.append(
            {"argv": tuple(argv), "cwd": cwd, "env": env, "timeout_seconds": timeout_seconds}
        )
        return CommandOutcome(
            argv=tuple(argv),
            cwd=cwd,
            exit_code=self.exit_code,
            stdout=self.stdout,
            stderr="",
            error=self.error,
        )


@pytest.fixture
def layout(tmp_path: Path) -> tuple[Path, Path]:
    original = tmp_path / "original"
    isolated = tmp_path / "isolated"
    original.mkdir()
    isolated.mkdir()
    (isolated / "package.json").write_text("{}", encoding="utf-8")
    return original, isolated


def test_links_original_dependency_tree(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    (original / "node_modules" / "left-pad").mkdir(parents=True)
    runner = FakeRunner()

    outcome = DependencyProvisioner(runner=runner).provision(isolated, original)

    assert outcome.status is ProvisionStatus.LINKED
    assert outcome.ok
    link = isolated / "node_modules"
    assert link.is_symlink()
    assert (link / "left-pad").is_dir()
    assert runner.calls == []


def test_existing_tree_is_left_alone(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    (original / "node_modules").mkdir()
    (isolated / "node_modules").mkdir()

    outcome = DependencyProvisioner(runner=FakeRunner()).provision(isolated, original)

    assert outcome.status is ProvisionStatus.PRESENT
    assert not (isolated / "node_modules").is_symlink()


def test_installs_with_frozen_lockfile(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    (isolated / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    runner = FakeRunner(stdout="installed 3 packages\n")

    outcome = DependencyProvisioner(
        runner=runner, environ={"PATH": "/usr/bin"}, timeout_seconds=90
    ).provision(isolated, original)

    assert outcome.status is ProvisionStatus.INSTALLED
    assert outcome.package_manager is PackageManager.PNPM
    assert outcome.command == ("pnpm", "install", "--frozen-lockfile")
    assert outcome.output == "installed 3 packages"
    assert runner.calls == [
        {
            "argv": ("pnpm", "install", "--frozen-lockfile"),
            "cwd": isolated,
            "env": {"PATH": "/usr/bin"},
            "timeout_seconds": 90,
        }
    ]


def test_npm_without_lockfile_uses_plain_install(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    runner = FakeRunner()

    outcome = DependencyProvisioner(runner=runner).provision(isolated, original)

    assert outcome.command == ("npm", "install")


def test_npm_lockfile_uses_ci(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    (isolated / "package-lock.json").write_text("{}", encoding="utf-8")

    outcome = DependencyProvisioner(runner=FakeRunner()).provision(isolated, original)

    assert outcome.command == ("npm", "ci")


def test_install_failure_is_reported(layout: tuple[Path, Path]) -> None:
    original, isolated = layout

    outcome = DependencyProvisioner(
        runner=FakeRunner(exit_code=1, stdout="ERR! 404 Not Found")
    ).provision(isolated, original)

    assert outcome.status is ProvisionStatus.FAILED
    assert not outcome.ok
    assert outcome.output == "ERR! 404 Not Found"


def test_launch_failure_is_reported(layout: tuple[Path, Path]) -> None:
    original, isolated = layout

    outcome = DependencyProvisioner(
        runner=FakeRunner(exit_code=None, error="failed to launch 'npm': not found")
    ).provision(isolated, original)

    assert outcome.status is ProvisionStatus.FAILED
    assert "failed to launch" in outcome.output


def test_no_manifest_in_isolated_copy_skips_install(tmp_path: Path) -> None:
    runner = FakeRunner()

    outcome = DependencyProvisioner(runner=runner).provision(tmp_path, tmp_path / "missing")

    assert outcome.status is ProvisionStatus.SKIPPED
    assert runner.calls == []


def test_install_disabled_skips(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    runner = FakeRunner()

    outcome = DependencyProvisioner(runner=runner, install_dependencies=False).provision(
        isolated, original
    )

    assert outcome.status is ProvisionStatus.SKIPPED
    assert runner.calls == []


def test_link_disabled_installs_instead(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    (original / "node_modules").mkdir()
    runner = FakeRunner()

    outcome = DependencyProvisioner(runner=runner, link_dependencies=False).provision(
        isolated, original
    )

    assert outcome.status is ProvisionStatus.INSTALLED
    assert not (isolated / "node_modules").exists()


def test_link_failure_warns_and_falls_back_to_install(
    layout: tuple[Path, Path],
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    original, isolated = layout
    (original / "node_modules").mkdir()

    def _refuse(*_args: object, **_kwargs: object) -> None:
        raise PermissionError(1, "Operation not permitted")

    monkeypatch.setattr(os, "symlink", _refuse)
    runner = FakeRunner()

    with caplog.at_level(logging.WARNING, logger="commitwise"):
        outcome = DependencyProvisioner(runner=runner).provision(isolated, original)

    assert outcome.status is ProvisionStatus.INSTALLED
    assert len(runner.calls) == 1
    assert any("Operation not permitted" in record.getMessage() for record in caplog.records)


def test_original_tree_is_never_modified(layout: tuple[Path, Path]) -> None:
    original, isolated = layout
    tree = original / "node_modules"
    tree.mkdir()
    (tree / "marker").write_text("keep", encoding="utf-8")

    DependencyProvisioner(runner=FakeRunner()).provision(isolated, original)
    (isolated / "node_modules").unlink()

    assert (tree / "marker").read_text(encoding="utf-8") == "keep"


def test_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValueError):
        DependencyProvisioner(timeout_seconds=-1)
