"""Typed runtime settings threaded through the verification components."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from commitwise.constants import MAX_CHECK_OUTPUT_CHARS, MAX_DIFF_CHARS, MAX_ISSUES_TO_DISPLAY


@dataclass(frozen=True, slots=True)
class VerificationSettings:
    """Explicit inputs for one verification call.

    ``environ`` is the environment handed to git, package managers, and the
    check itself; ``None`` means the child inherits the current process
    environment. Timeouts of ``None`` mean unbounded.
    """

    environ: Mapping[str, str] | None = None
    temp_root: Path | None = None
    check_timeout_seconds: float | None = None
    install_timeout_seconds: float | None = None
    link_dependencies: bool = True
    install_dependencies: bool = True

    def __post_init__(self) -> None:
        for name in ("check_timeout_seconds", "install_timeout_seconds"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be > 0 when provided")


def settings_from_config(
    config: Mapping[str, Any],
    *,
    environ: Mapping[str, str] | None = None,
) -> VerificationSettings:
    """Build ``VerificationSettings`` from a validated config's ``[verification]`` table."""

    section = config["verification"]
    temp_root = section["temp_root"]
    return VerificationSettings(
        environ=dict(environ) if environ is not None else None,
        temp_root=Path(temp_root) if temp_root else None,
        check_timeout_seconds=_positive_or_none(section["check_timeout_seconds"]),
        install_timeout_seconds=_positive_or_none(section["install_timeout_seconds"]),
        link_dependencies=bool(section["link_dependencies"]),
        install_dependencies=bool(section["install_dependencies"]),
    )


@dataclass(frozen=True, slots=True)
class ReviewSettings:
    """Bounds on what is handed to the model collaborators after verification."""

    scan_enabled: bool = True
    max_diff_chars: int = MAX_DIFF_CHARS
    max_check_output_chars: int = MAX_CHECK_OUTPUT_CHARS
    max_issues_displayed: int = MAX_ISSUES_TO_DISPLAY

    def __post_init__(self) -> None:
        for name in ("max_diff_chars", "max_check_output_chars"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.max_issues_displayed < 0:
            raise ValueError("max_issues_displayed must be >= 0")


def review_settings_from_config(config: Mapping[str, Any]) -> ReviewSettings:
    """Build ``ReviewSettings`` from a validated config's ``[review]`` table."""

    section = config["review"]
    return ReviewSettings(
        scan_enabled=bool(section["scan_enabled"]),
        max_diff_chars=int(section["max_diff_chars"]),
        max_check_output_chars=int(section["max_check_output_chars"]),
        max_issues_displayed=int(section["max_issues_displayed"]),
    )


def _positive_or_none(value: float) -> float | None:
    # 0 disables the timeout.
    return float(value) if value > 0 else None


__all__ = [
    "ReviewSettings",
    "VerificationSettings",
    "review_settings_from_config",
    "settings_from_config",
]
