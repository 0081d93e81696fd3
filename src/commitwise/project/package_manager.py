"""Package-manager detection from lockfiles."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from pathlib import Path


class PackageManager(StrEnum):
    """Script runners recognised by check discovery."""

    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"
    BUN = "bun"


DEFAULT_PACKAGE_MANAGER: Final[PackageManager] = PackageManager.NPM

# Detection order matters: the first manager with a lockfile wins.
_DETECTION_ORDER: Final[tuple[tuple[PackageManager, tuple[str, ...]], ...]] = (
    (PackageManager.PNPM, ("pnpm-lock.yaml",)),
    (PackageManager.YARN, ("yarn.lock",)),
    (PackageManager.BUN, ("bun.lockb", "bun.lock")),
)

_LOCKFILES: Final[dict[PackageManager, tuple[str, ...]]] = {
    PackageManager.NPM: ("package-lock.json", "npm-shrinkwrap.json"),
    PackageManager.PNPM: ("pnpm-lock.yaml",),
    PackageManager.YARN: ("yarn.lock",),
    PackageManager.BUN: ("bun.lockb", "bun.lock"),
}


def detect_package_manager(repo_root: Path) -> PackageManager:
    """Return the package manager whose lockfile is present, defaulting to npm."""

    for manager, lockfiles in _DETECTION_ORDER:
        if any((repo_root / name).is_file() for name in lockfiles):
            return manager
    return DEFAULT_PACKAGE_MANAGER


def find_lockfile(repo_root: Path, manager: PackageManager) -> Path | None:
    """Return the first lockfile belonging to ``manager`` under ``repo_root``."""

    for name in _LOCKFILES[manager]:
        candidate = repo_root / name
        if candidate.is_file():
            return candidate
    return None


def install_command(manager: PackageManager, *, frozen: bool) -> tuple[str, ...]:
    """Build the dependency install argv, reproducible when ``frozen`` is set."""

    if manager is PackageManager.NPM:
        return ("npm", "ci") if frozen else ("npm", "install")
    if frozen:
        return (manager.value, "install", "--frozen-lockfile")
    return (manager.value, "install")


__all__ = [
    "DEFAULT_PACKAGE_MANAGER",
    "PackageManager",
    "detect_package_manager",
    "find_lockfile",
    "install_command",
]
