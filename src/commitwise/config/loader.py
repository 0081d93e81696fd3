"""
commitwise — layered configuration loader.

Purpose
- Load the effective config from defaults, the global file, the project file,
  ``COMMITWISE_*`` environment variables, and CLI overrides.

Functional requirements
- Precedence: CLI > env > project file > global file > defaults.
- TOML via ``tomllib``. Relative paths resolve against the file that set them;
  relative paths from the environment or the CLI resolve against ``cwd``.
- The environment is always passed in; nothing here reads ``os.environ``.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

from commitwise.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
    redact_config,
)
from commitwise.constants import (
    ENV_PREFIX,
    GLOBAL_CONFIG_DIRNAME,
    GLOBAL_CONFIG_FILENAME,
    PROJECT_CONFIG_FILENAME,
)

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ValueType = Literal["str", "int", "float", "bool"]


@dataclass(frozen=True, slots=True)
class _Binding:
    path: tuple[str, ...]
    value_type: _ValueType


class ConfigLoadError(ValueError):
    """Raised when config cannot be read or overrides cannot be coerced."""


def global_config_path(environ: Mapping[str, str]) -> Path | None:
    """``$XDG_CONFIG_HOME/commitwise/config.toml``, falling back to ``~/.config``."""

    xdg = environ.get("XDG_CONFIG_HOME", "").strip()
    if xdg:
        return Path(xdg) / GLOBAL_CONFIG_DIRNAME / GLOBAL_CONFIG_FILENAME
    home = environ.get("HOME", "").strip()
    if home:
        return Path(home) / ".config" / GLOBAL_CONFIG_DIRNAME / GLOBAL_CONFIG_FILENAME
    return None


def load_config(
    repo_root: str | Path | None = None,
    *,
    config_path: str | Path | None = None,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: str | Path | None = None,
) -> dict[str, Any]:
    """Load the effective config with deterministic precedence.

    ``cwd`` anchors relative path overrides from ``environ`` and ``cli_overrides``;
    it defaults to the process working directory.
    """

    env_map = dict(environ or {})
    base_dir = Path(cwd).resolve() if cwd is not None else Path.cwd()
    merged: dict[str, Any] = dict(default_config())

    global_path = global_config_path(env_map)
    if global_path is not None:
        merged = merge_config(merged, _load_layer(global_path, required=False))

    if config_path is not None:
        project_path: Path | None = Path(config_path).expanduser().resolve()
        required = True
    elif repo_root is not None:
        project_path = Path(repo_root).resolve() / PROJECT_CONFIG_FILENAME
        required = False
    else:
        project_path = None
        required = False
    if project_path is not None:
        merged = merge_config(merged, _load_layer(project_path, required=required))

    merged = assert_valid_config(merged)
    env_layer = _collect_env_overrides(merged, env_map)
    merged = merge_config(merged, _normalize_paths(env_layer, base_dir=base_dir))
    cli_layer = _materialize_cli_overrides(cli_overrides or {})
    merged = merge_config(merged, _normalize_paths(cli_layer, base_dir=base_dir))
    return assert_valid_config(merged)


def effective_config(config: Mapping[str, object]) -> dict[str, Any]:
    """Redacted effective config, suitable for logging."""

    return redact_config(config)


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return a deterministic JSON dump of the redacted effective config."""

    return json.dumps(effective_config(config), sort_keys=True, indent=2, ensure_ascii=False)


def _load_layer(path: Path, *, required: bool) -> dict[str, Any]:
    payload = _load_toml_file(path, required=required)
    return _normalize_paths(payload, base_dir=path.resolve().parent)


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    return parsed


def _normalize_paths(payload: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    materialized = merge_config({}, payload)
    for field_path in PATH_FIELDS:
        value = _get_nested(materialized, field_path)
        # Empty means "unset" and stays empty.
        if isinstance(value, str) and value.strip():
            _set_nested(materialized, field_path, _normalize_one_path(value, base_dir))
    return materialized


def _normalize_one_path(raw: str, base_dir: Path) -> str:
    candidate = Path(raw.strip()).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(str(candidate))).as_posix()


def _collect_env_overrides(
    config: Mapping[str, object], environ: Mapping[str, str]
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_name, binding in sorted(_build_bindings(config).items()):
        raw = environ.get(env_name)
        if raw is None:
            continue
        value = _coerce_env(raw, binding.value_type, env_name, binding.path)
        _set_nested(overrides, binding.path, value)
    return overrides


def _build_bindings(config: Mapping[str, object]) -> dict[str, _Binding]:
    bindings: dict[str, _Binding] = {}
    for path, value in _iter_scalar_paths(config):
        if path[0] == "meta":
            continue
        kind = _kind_for_value(value)
        if kind is not None:
            bindings[_env_name_for_path(path)] = _Binding(path=path, value_type=kind)
    return bindings


def _iter_scalar_paths(
    payload: Mapping[str, object],
    prefix: tuple[str, ...] = (),
) -> list[tuple[tuple[str, ...], object]]:
    pairs: list[tuple[tuple[str, ...], object]] = []
    for key in sorted(payload):
        value = payload[key]
        path = (*prefix, key)
        if isinstance(value, Mapping):
            pairs.extend(_iter_scalar_paths(value, path))
        else:
            pairs.append((path, value))
    return pairs


def _kind_for_value(value: object) -> _ValueType | None:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "str"
    return None


def _coerce_env(
    raw: str,
    value_type: _ValueType,
    env_name: str,
    path: tuple[str, ...],
) -> object:
    value = raw.strip()
    dotted = ".".join(path)
    if value_type == "str":
        return value
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{env_name} -> {dotted} must be an integer") from exc
    if value_type == "float":
        try:
            return float(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{env_name} -> {dotted} must be a number") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(
        f"{env_name} -> {dotted} must be a boolean (true/false/1/0/yes/no/on/off)"
    )


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    """Dotted keys (``verification.check_timeout_seconds``) become nested tables."""

    payload: dict[str, Any] = {}
    for key in sorted(cli_overrides):
        path = tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        _set_nested(payload, path, cli_overrides[key])
    return payload


def _set_nested(target: dict[str, Any], path: tuple[str, ...], value: object) -> None:
    cursor = target
    for part in path[:-1]:
        next_node = cursor.get(part)
        if not isinstance(next_node, dict):
            next_node = {}
            cursor[part] = next_node
        cursor = next_node
    cursor[path[-1]] = value


def _get_nested(payload: Mapping[str, object], path: tuple[str, ...]) -> object | None:
    cursor: object = payload
    for part in path:
        if not isinstance(cursor, Mapping) or part not in cursor:
            return None
        cursor = cursor[part]
    return cursor


def _env_name_for_path(path: tuple[str, ...]) -> str:
    return ENV_PREFIX + "_".join(part.upper() for part in path)


__all__ = [
    "ConfigLoadError",
    "dump_effective_config",
    "effective_config",
    "global_config_path",
    "load_config",
]
