"""Executable CLI entrypoint for ``commitwise``."""

from __future__ import annotations

import sys
import traceback
from collections.abc import Iterator, Sequence
from enum import IntEnum

from commitwise.config import ConfigLoadError, ConfigValidationError
from commitwise.errors import IsolationError


class ExitCode(IntEnum):
    """Process exit codes shared by every subcommand."""

    SUCCESS = 0
    VERIFICATION_FAILED = 1
    CONFIG_ERROR = 2
    ISOLATION_ERROR = 3
    INTERNAL_ERROR = 4


_KNOWN_CODES = frozenset(int(code) for code in ExitCode)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and map every way out of it onto an ``ExitCode``."""

    try:
        from commitwise.ui.cli import run_cli

        return _coerce_exit_code(run_cli(argv))
    except SystemExit as exc:
        # argparse exits on --help and usage errors.
        return _coerce_exit_code(exc.code)
    except BaseException as exc:  # noqa: BLE001 - CLI boundary normalization.
        code = exit_code_for(exc)
        _report(exc, code)
        return int(code)


def exit_code_for(exc: BaseException) -> ExitCode:
    """Classify ``exc`` by the first recognised error in its cause chain."""

    for link in _causes(exc):
        if isinstance(link, IsolationError):
            return ExitCode.ISOLATION_ERROR
        if isinstance(link, (ConfigLoadError, ConfigValidationError)):
            return ExitCode.CONFIG_ERROR
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    visited: set[int] = set()
    link: BaseException | None = exc
    while link is not None and id(link) not in visited:
        visited.add(id(link))
        yield link
        if link.__cause__ is not None:
            link = link.__cause__
        elif not link.__suppress_context__:
            link = link.__context__
        else:
            link = None


def _coerce_exit_code(raw: object) -> int:
    if raw is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw, int) and raw in _KNOWN_CODES:
        return raw
    if isinstance(raw, str) and raw.strip():
        print(raw.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


def _report(exc: BaseException, code: ExitCode) -> None:
    if code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(exc, file=sys.stderr)
    else:
        print(str(exc).strip() or type(exc).__name__, file=sys.stderr)


__all__ = ["ExitCode", "cli_entrypoint", "exit_code_for"]
