"""Check discovery, ranking, and execution."""

from commitwise.checks.catalog import build_check_catalog, script_command
from commitwise.checks.executor import CheckExecutor
from commitwise.checks.fallback import resolve_typecheck_fallback
from commitwise.checks.models import (
    CHECK_KIND_PRIORITY,
    CheckCommand,
    CheckKind,
    CheckResult,
    check_kind_rank,
)
from commitwise.checks.selector import CheckSelection, rank_checks, select_check

__all__ = [
    "CHECK_KIND_PRIORITY",
    "CheckCommand",
    "CheckExecutor",
    "CheckKind",
    "CheckResult",
    "CheckSelection",
    "build_check_catalog",
    "check_kind_rank",
    "rank_checks",
    "resolve_typecheck_fallback",
    "script_command",
    "select_check",
]
