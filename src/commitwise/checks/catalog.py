"""Build candidate checks from the scripts a project declares."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from commitwise.checks.models import CheckCommand, CheckKind
from commitwise.project.manifest import ManifestState, PackageManifest, load_manifest
from commitwise.project.package_manager import PackageManager, detect_package_manager

if TYPE_CHECKING:
    from pathlib import Path

CANONICAL_TEST_SCRIPT: Final[str] = "test"

# Script names recognised per intent, in lookup order. Only tests have synonyms.
SCRIPT_NAMES: Final[dict[CheckKind, tuple[str, ...]]] = {
    CheckKind.TESTS: (CANONICAL_TEST_SCRIPT, "test:run", "test:ci", "test:unit"),
    CheckKind.TYPECHECK: ("typecheck",),
    CheckKind.LINT: ("lint",),
    CheckKind.BUILD: ("build",),
}


def build_check_catalog(
    repo_root: Path,
    *,
    manifest: ManifestState | None = None,
    package_manager: PackageManager | None = None,
) -> tuple[CheckCommand, ...]:
    """Return one check per declared intent, in manifest-independent intent order.

    A repository without a usable manifest simply has no script checks.
    """

    resolved = manifest if manifest is not None else load_manifest(repo_root)
    if not isinstance(resolved, PackageManifest):
        return ()

    manager = package_manager if package_manager is not None else detect_package_manager(repo_root)
    catalog: list[CheckCommand] = []
    for kind, names in SCRIPT_NAMES.items():
        script = next((name for name in names if resolved.has_script(name)), None)
        if script is None:
            continue
        catalog.append(script_command(kind, script, manager))
    return tuple(catalog)


def script_command(kind: CheckKind, script: str, manager: PackageManager) -> CheckCommand:
    """Invoke ``script`` through ``manager``.

    The canonical test script uses the ``<pm> test`` shorthand; everything else
    uses ``<pm> run <script>``.
    """

    program = manager.value
    if kind is CheckKind.TESTS and script == CANONICAL_TEST_SCRIPT:
        return CheckCommand(kind=kind, name=f"{program} test", program=program, args=("test",))
    return CheckCommand(
        kind=kind,
        name=f"{program} run {script}",
        program=program,
        args=("run", script),
    )


__all__ = ["CANONICAL_TEST_SCRIPT", "SCRIPT_NAMES", "build_check_catalog", "script_command"]
