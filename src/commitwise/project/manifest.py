"""
commitwise — package manifest schema.

Purpose
- Turn ``package.json`` into a validated, immutable structure.
- Represent a missing or broken manifest as an explicit ``NoManifest`` value.

Functional requirements
- Only ``scripts``, ``dependencies``, ``devDependencies`` and
  ``peerDependencies`` are read; every other field is ignored.
- Loading never raises. Many repositories are not script-driven, so absence
  of a manifest is an ordinary outcome.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import TypeAlias

from commitwise.constants import MANIFEST_FILENAME


class ManifestAbsence(StrEnum):
    """Why no usable manifest was found."""

    MISSING = "missing"
    UNREADABLE = "unreadable"
    MALFORMED = "malformed"


@dataclass(frozen=True, slots=True)
class PackageManifest:
    """Validated subset of ``package.json``."""

    path: Path
    scripts: Mapping[str, str] = field(default_factory=dict)
    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    peer_dependencies: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "scripts", _freeze(self.scripts))
        object.__setattr__(self, "dependencies", _freeze(self.dependencies))
        object.__setattr__(self, "dev_dependencies", _freeze(self.dev_dependencies))
        object.__setattr__(self, "peer_dependencies", _freeze(self.peer_dependencies))

    def has_script(self, name: str) -> bool:
        """Return ``True`` when ``name`` is declared with a non-empty command."""

        return bool(self.scripts.get(name, "").strip())

    def depends_on(self, package: str) -> bool:
        """Return ``True`` when ``package`` appears in any dependency section."""

        return any(
            package in section
            for section in (self.dependencies, self.dev_dependencies, self.peer_dependencies)
        )


@dataclass(frozen=True, slots=True)
class NoManifest:
    """Explicit "no manifest" variant."""

    path: Path
    reason: ManifestAbsence
    detail: str = ""


ManifestState: TypeAlias = PackageManifest | NoManifest


def load_manifest(repo_root: Path) -> ManifestState:
    """Read ``package.json`` under ``repo_root``."""

    path = repo_root / MANIFEST_FILENAME
    if not path.is_file():
        return NoManifest(path=path, reason=ManifestAbsence.MISSING)

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return NoManifest(path=path, reason=ManifestAbsence.UNREADABLE, detail=str(exc))

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        return NoManifest(path=path, reason=ManifestAbsence.MALFORMED, detail=str(exc))

    return parse_manifest(payload, path=path)


def parse_manifest(payload: object, *, path: Path) -> ManifestState:
    """Validate an already-decoded manifest payload."""

    if not isinstance(payload, Mapping):
        return NoManifest(
            path=path,
            reason=ManifestAbsence.MALFORMED,
            detail=f"manifest root must be an object, got {type(payload).__name__}",
        )

    return PackageManifest(
        path=path,
        scripts=_string_section(payload.get("scripts")),
        dependencies=_string_section(payload.get("dependencies")),
        dev_dependencies=_string_section(payload.get("devDependencies")),
        peer_dependencies=_string_section(payload.get("peerDependencies")),
    )


def _string_section(value: object) -> dict[str, str]:
    # Non-object sections and non-string entries are dropped rather than rejected.
    if not isinstance(value, Mapping):
        return {}
    return {
        key: item
        for key, item in value.items()
        if isinstance(key, str) and isinstance(item, str)
    }


def _freeze(value: Mapping[str, str]) -> Mapping[str, str]:
    if isinstance(value, MappingProxyType):
        return value
    return MappingProxyType(dict(value))


__all__ = [
    "ManifestAbsence",
    "ManifestState",
    "NoManifest",
    "PackageManifest",
    "load_manifest",
    "parse_manifest",
]
