"""Project inspection: package manager, manifest, and framework context."""

from commitwise.project.context import Framework, Language, ProjectContext, detect_project_context
from commitwise.project.manifest import (
    ManifestAbsence,
    ManifestState,
    NoManifest,
    PackageManifest,
    load_manifest,
    parse_manifest,
)
from commitwise.project.package_manager import (
    PackageManager,
    detect_package_manager,
    find_lockfile,
    install_command,
)

__all__ = [
    "Framework",
    "Language",
    "ManifestAbsence",
    "ManifestState",
    "NoManifest",
    "PackageManager",
    "PackageManifest",
    "ProjectContext",
    "detect_package_manager",
    "detect_project_context",
    "find_lockfile",
    "install_command",
    "load_manifest",
    "parse_manifest",
]
