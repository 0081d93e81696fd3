"""Pick the single most trustworthy check for a repository."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from commitwise.checks.catalog import build_check_catalog
from commitwise.checks.fallback import resolve_typecheck_fallback
from commitwise.checks.models import CheckCommand, check_kind_rank
from commitwise.project.manifest import ManifestState, load_manifest
from commitwise.project.package_manager import PackageManager, detect_package_manager

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True, slots=True)
class CheckSelection:
    """Ranked candidates plus the chosen command (``None`` when nothing applies)."""

    package_manager: PackageManager
    candidates: tuple[CheckCommand, ...]
    selected: CheckCommand | None

    @property
    def available(self) -> bool:
        return self.selected is not None


def rank_checks(commands: Sequence[CheckCommand]) -> tuple[CheckCommand, ...]:
    """Stable-sort ``commands`` by kind priority."""

    return tuple(sorted(commands, key=lambda command: check_kind_rank(command.kind)))


def select_check(repo_root: Path, *, manifest: ManifestState | None = None) -> CheckSelection:
    """Combine declared scripts with the typecheck fallback and pick the best one."""

    resolved = manifest if manifest is not None else load_manifest(repo_root)
    manager = detect_package_manager(repo_root)
    catalog = build_check_catalog(repo_root, manifest=resolved, package_manager=manager)
    fallback = resolve_typecheck_fallback(repo_root, catalog, manifest=resolved)

    combined = [*catalog, fallback] if fallback is not None else list(catalog)
    ranked = rank_checks(combined)
    return CheckSelection(
        package_manager=manager,
        candidates=ranked,
        selected=ranked[0] if ranked else None,
    )


__all__ = ["CheckSelection", "rank_checks", "select_check"]
