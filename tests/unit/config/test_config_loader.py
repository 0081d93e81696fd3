"""
commitwise — unit tests for the layered config loader

Purpose
- Validate deterministic config loading from defaults, global and project TOML,
  ``COMMITWISE_*`` env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > project file > global file > defaults.
- Env var type coercion and error reporting.
- Path normalization relative to the file that set the path.
- Redacted, deterministic effective config dumps.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from commitwise.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    global_config_path,
    load_config,
)
from commitwise.config.schema import ConfigValidationError, default_config


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_defaults_without_any_files(tmp_path: Path) -> None:
    loaded = load_config(tmp_path, environ={})

    assert loaded == default_config()


def test_precedence_global_project_env_cli(tmp_path: Path) -> None:
    xdg = tmp_path / "xdg"
    repo = tmp_path / "repo"
    repo.mkdir()
    _write_config(
        xdg / "commitwise" / "config.toml",
        "[verification]\ncheck_timeout_seconds = 10\ninstall_timeout_seconds = 90\n",
    )
    _write_config(repo / ".commitwise.toml", "[verification]\ncheck_timeout_seconds = 20\n")
    environ = {"XDG_CONFIG_HOME": str(xdg)}

    file_loaded = load_config(repo, environ=environ)
    env_loaded = load_config(
        repo, environ={**environ, "COMMITWISE_VERIFICATION_CHECK_TIMEOUT_SECONDS": "30"}
    )
    cli_loaded = load_config(
        repo,
        environ={**environ, "COMMITWISE_VERIFICATION_CHECK_TIMEOUT_SECONDS": "30"},
        cli_overrides={"verification.check_timeout_seconds": 40},
    )

    assert file_loaded["verification"]["check_timeout_seconds"] == 20.0
    assert file_loaded["verification"]["install_timeout_seconds"] == 90.0
    assert env_loaded["verification"]["check_timeout_seconds"] == 30.0
    assert cli_loaded["verification"]["check_timeout_seconds"] == 40.0


def test_global_path_prefers_xdg_then_home(tmp_path: Path) -> None:
    assert global_config_path({"XDG_CONFIG_HOME": "/x", "HOME": "/h"}) == Path(
        "/x/commitwise/config.toml"
    )
    assert global_config_path({"HOME": "/h"}) == Path("/h/.config/commitwise/config.toml")
    assert global_config_path({}) is None


def test_env_coercion_for_bool_and_level(tmp_path: Path) -> None:
    loaded = load_config(
        tmp_path,
        environ={
            "COMMITWISE_VERIFICATION_INSTALL_DEPENDENCIES": "off",
            "COMMITWISE_LOGGING_LEVEL": "debug",
            "COMMITWISE_REVIEW_MAX_DIFF_CHARS": "1200",
            "COMMITWISE_REVIEW_SCAN_ENABLED": "no",
        },
    )

    assert loaded["verification"]["install_dependencies"] is False
    assert loaded["logging"]["level"] == "DEBUG"
    assert loaded["review"]["max_diff_chars"] == 1200
    assert loaded["review"]["scan_enabled"] is False


@pytest.mark.parametrize(
    ("name", "raw"),
    [
        ("COMMITWISE_VERIFICATION_LINK_DEPENDENCIES", "maybe"),
        ("COMMITWISE_REVIEW_MAX_DIFF_CHARS", "lots"),
        ("COMMITWISE_VERIFICATION_CHECK_TIMEOUT_SECONDS", "soon"),
    ],
)
def test_env_coercion_errors_name_the_variable(tmp_path: Path, name: str, raw: str) -> None:
    with pytest.raises(ConfigLoadError, match=name):
        load_config(tmp_path, environ={name: raw})


def test_relative_paths_resolve_against_the_declaring_file(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _write_config(
        repo / ".commitwise.toml",
        '[verification]\ntemp_root = "scratch"\n\n[logging]\nlog_dir = "../logs"\n',
    )

    loaded = load_config(repo, environ={})

    resolved_repo = repo.resolve()
    assert loaded["verification"]["temp_root"] == (resolved_repo / "scratch").as_posix()
    assert loaded["logging"]["log_dir"] == (resolved_repo.parent / "logs").as_posix()


def test_relative_env_and_cli_paths_resolve_against_cwd(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()

    loaded = load_config(
        repo,
        environ={"COMMITWISE_VERIFICATION_TEMP_ROOT": "scratch"},
        cli_overrides={"logging.log_dir": "../logs"},
        cwd=elsewhere,
    )

    resolved = elsewhere.resolve()
    assert loaded["verification"]["temp_root"] == (resolved / "scratch").as_posix()
    assert loaded["logging"]["log_dir"] == (resolved.parent / "logs").as_posix()


def test_relative_env_path_defaults_to_process_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(None, environ={"COMMITWISE_VERIFICATION_TEMP_ROOT": "scratch"})

    assert loaded["verification"]["temp_root"] == (Path.cwd() / "scratch").as_posix()
    assert Path(loaded["verification"]["temp_root"]).is_absolute()


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path, config_path=tmp_path / "missing.toml", environ={})


def test_explicit_config_path_replaces_project_file(tmp_path: Path) -> None:
    _write_config(tmp_path / ".commitwise.toml", "[logging]\njson = true\n")
    explicit = tmp_path / "other.toml"
    _write_config(explicit, '[logging]\nlevel = "ERROR"\n')

    loaded = load_config(tmp_path, config_path=explicit, environ={})

    assert loaded["logging"]["level"] == "ERROR"
    assert loaded["logging"]["json"] is False


def test_invalid_toml_is_a_load_error(tmp_path: Path) -> None:
    _write_config(tmp_path / ".commitwise.toml", "[verification\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(tmp_path, environ={})


def test_unknown_keys_fail_validation(tmp_path: Path) -> None:
    _write_config(tmp_path / ".commitwise.toml", "[verification]\nparallel = true\n")

    with pytest.raises(ConfigValidationError, match="verification.parallel: unknown field"):
        load_config(tmp_path, environ={})


def test_dump_is_deterministic_and_redacted(tmp_path: Path) -> None:
    loaded = load_config(tmp_path, environ={})
    loaded_again = load_config(tmp_path, environ={})

    dumped = dump_effective_config(loaded)

    assert dumped == dump_effective_config(loaded_again)
    assert json.loads(dumped)["review"]["max_diff_chars"] == 50_000
