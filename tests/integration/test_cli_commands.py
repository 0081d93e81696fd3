"""
commitwise — CLI command contracts

Purpose
- Exercise ``check``, ``candidates``, and ``config`` through ``run_cli`` with an
  explicit environment, asserting exit codes and rendered or JSON output.
"""

from __future__ import annotations

import json
import os
import stat
import subprocess
from pathlib import Path

import pytest

from commitwise.main import ExitCode
from commitwise.ui.cli import run_cli

pytestmark = pytest.mark.integration

_FAKE_NPM = """\
#!/bin/sh
case "$1" in
  test)
    if grep -q "a + b" src/sum.js; then
      echo "1 passing"
      exit 0
    fi
    echo "1 failing"
    exit 1
    ;;
esac
exit 2
"""


def _git(repo_root: Path, env: dict[str, str], *args: str) -> None:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_root,
        env=env,
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise RuntimeError(f"git command failed: git {' '.join(args)}: {result.stderr.strip()}")


@pytest.fixture()
def env(tmp_path: Path) -> dict[str, str]:
    home = tmp_path / "home"
    bin_dir = tmp_path / "bin"
    home.mkdir()
    bin_dir.mkdir()
    npm = bin_dir / "npm"
    npm.write_text(_FAKE_NPM, encoding="utf-8")
    npm.chmod(npm.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    environ = os.environ.copy()
    for name in list(environ):
        if name.startswith("COMMITWISE_"):
            del environ[name]
    environ["PATH"] = f"{bin_dir}{os.pathsep}{environ.get('PATH', '')}"
    environ["HOME"] = str(home)
    environ["XDG_CONFIG_HOME"] = str(home / ".config")
    environ["GIT_CONFIG_NOSYSTEM"] = "1"
    environ["COMMITWISE_VERIFICATION_TEMP_ROOT"] = str(tmp_path / "scratch")
    environ["COMMITWISE_VERIFICATION_INSTALL_DEPENDENCIES"] = "false"
    return environ


@pytest.fixture()
def repo(tmp_path: Path, env: dict[str, str]) -> Path:
    repo_root = tmp_path / "repo"
    (repo_root / "src").mkdir(parents=True)
    _git(repo_root, env, "init", "--initial-branch=main", "--quiet")
    (repo_root / "package.json").write_text(
        json.dumps({"scripts": {"build": "vite build", "test": "vitest run"}}) + "\n",
        encoding="utf-8",
    )
    (repo_root / "src" / "sum.js").write_text(
        "export const sum = (a, b) => a + b;\n", encoding="utf-8"
    )
    _git(repo_root, env, "add", ".")
    _git(
        repo_root,
        env,
        "-c",
        "user.name=CLI Test",
        "-c",
        "user.email=cli-test@example.com",
        "commit",
        "--quiet",
        "-m",
        "initial",
    )
    return repo_root


def _stage_broken_sum(repo: Path, env: dict[str, str]) -> None:
    (repo / "src" / "sum.js").write_text("export const sum = (a, b) => a - b;\n", encoding="utf-8")
    _git(repo, env, "add", "src/sum.js")


def test_check_json_passes_on_clean_stage(
    repo: Path, env: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = run_cli(["check", "--repo-root", str(repo), "--json"], environ=env)

    assert exit_code == ExitCode.SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "kind": "tests",
        "name": "npm test",
        "ok": True,
        "output": "1 passing",
        "ran": True,
    }


def test_check_reports_failure_with_exit_code_one(
    repo: Path, env: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    _stage_broken_sum(repo, env)

    exit_code = run_cli(["check", "--repo-root", str(repo), "--no-color"], environ=env)

    out = capsys.readouterr().out
    assert exit_code == ExitCode.VERIFICATION_FAILED
    assert "FAIL npm test (tests)" in out
    assert "1 failing" in out


def test_check_isolation_failure_is_exit_code_three(
    tmp_path: Path, env: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    unborn = tmp_path / "unborn"
    unborn.mkdir()
    _git(unborn, env, "init", "--quiet")
    (unborn / "package.json").write_text('{"scripts": {"test": "vitest"}}\n', encoding="utf-8")
    _git(unborn, env, "add", "package.json")

    exit_code = run_cli(["check", "--repo-root", str(unborn), "--json"], environ=env)

    assert exit_code == ExitCode.ISOLATION_ERROR
    payload = json.loads(capsys.readouterr().out)
    assert payload["stage"] == "worktree"
    assert "could not be reproduced" in payload["error"]


def test_candidates_lists_ranked_checks(
    repo: Path, env: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = run_cli(["candidates", "--repo-root", str(repo), "--json"], environ=env)

    assert exit_code == ExitCode.SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["package_manager"] == "npm"
    assert [item["name"] for item in payload["candidates"]] == ["npm test", "npm run build"]
    assert payload["selected"]["name"] == "npm test"
    assert payload["project"] == {"framework": "unknown", "language": "js"}


def test_config_json_reflects_env_and_project_file(
    repo: Path, env: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    (repo / ".commitwise.toml").write_text(
        "[verification]\ncheck_timeout_seconds = 120\n", encoding="utf-8"
    )

    exit_code = run_cli(["config", "--repo-root", str(repo), "--json"], environ=env)

    assert exit_code == ExitCode.SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["verification"]["check_timeout_seconds"] == 120.0
    assert payload["verification"]["install_dependencies"] is False


def test_invalid_config_is_exit_code_two(
    repo: Path, env: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    (repo / ".commitwise.toml").write_text("[review]\napi_key = \"sk-oops\"\n", encoding="utf-8")

    exit_code = run_cli(["config", "--repo-root", str(repo)], environ=env)

    assert exit_code == ExitCode.CONFIG_ERROR
    err = capsys.readouterr().err
    assert "review.api_key" in err
    assert "environment variables" in err
    assert "sk-oops" not in err
