"""
Typecheck fallback — synthesized when a typed project declares no typecheck script.

Functional requirements:
- Only consulted when the catalog has no typecheck entry.
- Requires ``tsconfig.json``; without it nothing is emitted.
- Component-template projects (Vue, Nuxt) get ``vue-tsc``; everything else ``tsc``.
- Always runs through ``npx`` because the tool may not be installed locally.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

from commitwise.checks.models import CheckCommand, CheckKind
from commitwise.constants import TSCONFIG_FILENAME
from commitwise.project.context import detect_project_context
from commitwise.project.manifest import ManifestState, load_manifest

if TYPE_CHECKING:
    from pathlib import Path

FETCH_AND_RUN_PROGRAM: Final[str] = "npx"


def resolve_typecheck_fallback(
    repo_root: Path,
    catalog: Sequence[CheckCommand],
    *,
    manifest: ManifestState | None = None,
) -> CheckCommand | None:
    """Return a synthesized typecheck, or ``None`` when one is not warranted."""

    if any(command.kind is CheckKind.TYPECHECK for command in catalog):
        return None
    if not (repo_root / TSCONFIG_FILENAME).is_file():
        return None

    resolved = manifest if manifest is not None else load_manifest(repo_root)
    if detect_project_context(resolved).uses_component_templates:
        return _fetch_and_run("vue-tsc", "vue-tsc")
    return _fetch_and_run("typescript", "tsc")


def _fetch_and_run(package: str, binary: str) -> CheckCommand:
    return CheckCommand(
        kind=CheckKind.TYPECHECK,
        name=f"{FETCH_AND_RUN_PROGRAM} {binary} --noEmit",
        program=FETCH_AND_RUN_PROGRAM,
        args=("--yes", "--package", package, "--", binary, "--noEmit"),
    )


__all__ = ["FETCH_AND_RUN_PROGRAM", "resolve_typecheck_fallback"]
