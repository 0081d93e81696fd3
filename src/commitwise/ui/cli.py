"""Command-line interface router for commitwise."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from commitwise.checks.selector import select_check
from commitwise.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    effective_config,
    load_config,
    settings_from_config,
)
from commitwise.errors import IsolationError
from commitwise.main import ExitCode
from commitwise.observability.logging import LoggingConfig, setup_logging, shutdown_logging
from commitwise.project.context import detect_project_context
from commitwise.project.manifest import load_manifest
from commitwise.ui.render import CLIRenderer, candidates_payload, create_renderer, emit_json
from commitwise.verification import verify_staged_changes

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = ExitCode.CONFIG_ERROR

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="commitwise",
        description=(
            "commitwise — verify staged changes with the project's own checks.\n\n"
            "Common workflows:\n"
            "  commitwise check             Run the best check against the staged change\n"
            "  commitwise candidates        Show which checks would be considered\n"
            "  commitwise config            Show the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--repo-root",
        default=".",
        help="Repository root directory (default: current working directory).",
    )
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a TOML config (default: <repo-root>/.commitwise.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show check output on success and debug logging.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        type=str.upper,
        help="Override logging.level for this invocation.",
    )
    common.add_argument("--json", action="store_true", help="Emit deterministic JSON output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Run the most trustworthy check against the staged change",
        description=(
            "Select the highest-confidence check (tests > typecheck > lint > build),\n"
            "reproduce HEAD plus the staged diff in a temporary worktree, and run it there.\n\n"
            "Exit codes: 0 passed or nothing to run, 1 check failed, 2 configuration error,\n"
            "3 staged change could not be isolated, 4 internal error.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.set_defaults(handler=_cmd_check)

    candidates_parser = subparsers.add_parser(
        "candidates",
        parents=[common],
        help="List ranked candidate checks without running anything",
    )
    candidates_parser.set_defaults(handler=_cmd_candidates)

    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration (redacted)",
        description=(
            "Display the effective config after merging defaults, the global file,\n"
            "the project file, COMMITWISE_* environment variables, and CLI flags.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Parse argv, route to a command handler, and return the process exit code.

    ``environ`` defaults to the process environment; it is the only place the
    environment is read.
    """

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return ExitCode.CONFIG_ERROR

    env_map = dict(os.environ if environ is None else environ)
    try:
        return int(handler(namespace, env_map))
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace, environ: Mapping[str, str]) -> int:
    repo_root = _repo_root(args)
    config = _prepare(args, repo_root, environ)
    renderer = _get_renderer(args)
    settings = settings_from_config(config, environ=environ)

    try:
        result = verify_staged_changes(repo_root, settings)
    except IsolationError as exc:
        logger.debug("isolation failed at stage %s", exc.stage)
        if args.json:
            emit_json({"error": str(exc), "stage": exc.stage})
        else:
            renderer.error(str(exc))
        return ExitCode.ISOLATION_ERROR

    if args.json:
        emit_json(result.to_dict())
    else:
        renderer.check_result(result)
    return ExitCode.VERIFICATION_FAILED if result.failed else ExitCode.SUCCESS


def _cmd_candidates(args: argparse.Namespace, environ: Mapping[str, str]) -> int:
    repo_root = _repo_root(args)
    _prepare(args, repo_root, environ)

    manifest = load_manifest(repo_root)
    selection = select_check(repo_root, manifest=manifest)
    context = detect_project_context(manifest)

    if args.json:
        emit_json(candidates_payload(selection, context))
    else:
        _get_renderer(args).candidates(selection, context)
    return ExitCode.SUCCESS


def _cmd_config(args: argparse.Namespace, environ: Mapping[str, str]) -> int:
    repo_root = _repo_root(args)
    config = _prepare(args, repo_root, environ)

    if args.json:
        print(dump_effective_config(config))
        return ExitCode.SUCCESS

    renderer = _get_renderer(args)
    for section, values in effective_config(config).items():
        renderer.section(f"[{section}]")
        if isinstance(values, Mapping):
            for key, value in values.items():
                renderer.kv(key, value)
        else:
            renderer.kv(section, values)
    return ExitCode.SUCCESS


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _prepare(
    args: argparse.Namespace,
    repo_root: Path,
    environ: Mapping[str, str],
) -> dict[str, Any]:
    """Load configuration and install logging for this invocation."""

    config = _load_effective_config(args, repo_root, environ)
    section = config["logging"]
    setup_logging(
        LoggingConfig(
            level=section["level"],
            log_dir=section["log_dir"] or None,
            json=section["json"],
        )
    )
    return config


def _load_effective_config(
    args: argparse.Namespace,
    repo_root: Path,
    environ: Mapping[str, str],
) -> dict[str, Any]:
    overrides: dict[str, object] = {}
    if args.log_level is not None:
        overrides["logging.level"] = args.log_level
    elif args.verbose:
        overrides["logging.level"] = "DEBUG"

    try:
        return load_config(
            repo_root,
            config_path=args.config_path,
            cli_overrides=overrides,
            environ=environ,
            cwd=Path.cwd(),
        )
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CONFIG_ERROR) from exc


def _repo_root(args: argparse.Namespace) -> Path:
    candidate = Path(args.repo_root).expanduser().resolve()
    if not candidate.is_dir():
        raise CLIError(
            f"repo root is not a directory: {candidate}", exit_code=ExitCode.CONFIG_ERROR
        )
    return candidate


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=bool(args.no_color), verbose=bool(args.verbose))


__all__ = ["CLIError", "build_parser", "run_cli"]
