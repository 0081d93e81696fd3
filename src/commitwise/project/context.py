"""Frontend framework and language detection from manifest dependency metadata."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from commitwise.project.manifest import ManifestState, PackageManifest


class Framework(StrEnum):
    NUXT = "nuxt"
    NEXT = "next"
    VUE = "vue"
    REACT = "react"
    SVELTE = "svelte"
    ANGULAR = "angular"
    VITE = "vite"
    UNKNOWN = "unknown"


class Language(StrEnum):
    TS = "ts"
    JS = "js"
    UNKNOWN = "unknown"


# First match wins; meta-frameworks precede the libraries they bundle.
_FRAMEWORK_MARKERS: Final[tuple[tuple[Framework, tuple[str, ...]], ...]] = (
    (Framework.NUXT, ("nuxt", "nuxt3")),
    (Framework.NEXT, ("next",)),
    (Framework.VUE, ("vue",)),
    (Framework.REACT, ("react",)),
    (Framework.SVELTE, ("svelte",)),
    (Framework.ANGULAR, ("@angular/core",)),
    (Framework.VITE, ("vite",)),
)

# Frameworks whose single-file component templates need a template-aware type checker.
COMPONENT_TEMPLATE_FRAMEWORKS: Final[frozenset[Framework]] = frozenset(
    {Framework.NUXT, Framework.VUE}
)


@dataclass(frozen=True, slots=True)
class ProjectContext:
    framework: Framework
    language: Language

    @property
    def uses_component_templates(self) -> bool:
        return self.framework in COMPONENT_TEMPLATE_FRAMEWORKS

    def to_dict(self) -> dict[str, str]:
        return {"framework": self.framework.value, "language": self.language.value}


def detect_project_context(manifest: ManifestState) -> ProjectContext:
    """Classify the project from its declared dependencies."""

    if not isinstance(manifest, PackageManifest):
        return ProjectContext(framework=Framework.UNKNOWN, language=Language.UNKNOWN)

    framework = Framework.UNKNOWN
    for candidate, packages in _FRAMEWORK_MARKERS:
        if any(manifest.depends_on(package) for package in packages):
            framework = candidate
            break

    language = Language.TS if manifest.depends_on("typescript") else Language.JS
    return ProjectContext(framework=framework, language=language)


__all__ = [
    "COMPONENT_TEMPLATE_FRAMEWORKS",
    "Framework",
    "Language",
    "ProjectContext",
    "detect_project_context",
]
