"""
commitwise — check data model.

Purpose
- Define the candidate check (``CheckCommand``), the verification outcome
  (``CheckResult``), and the fixed confidence ordering over check kinds.

Functional requirements
- ``CheckCommand`` is immutable and always carries an argv, never a shell string.
- ``CheckResult`` enforces: a result that did not run is ``ok`` and carries no
  kind, name, or output.
- Ranking is an explicit function so the tie-break rule can be tested directly.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Final


class CheckKind(StrEnum):
    """Kinds of quality check, listed from strongest to weakest evidence."""

    TESTS = "tests"
    TYPECHECK = "typecheck"
    LINT = "lint"
    BUILD = "build"


# A failing test run is unambiguous breakage; a failing build can be environmental.
CHECK_KIND_PRIORITY: Final[tuple[CheckKind, ...]] = (
    CheckKind.TESTS,
    CheckKind.TYPECHECK,
    CheckKind.LINT,
    CheckKind.BUILD,
)

_RANKS: Final[dict[CheckKind, int]] = {kind: rank for rank, kind in enumerate(CHECK_KIND_PRIORITY)}


def check_kind_rank(kind: CheckKind) -> int:
    """Return the priority rank of ``kind``; lower ranks are selected first."""

    return _RANKS[CheckKind(kind)]


@dataclass(frozen=True, slots=True)
class CheckCommand:
    """One candidate check and the exact argv that runs it."""

    kind: CheckKind
    name: str
    program: str
    args: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", CheckKind(self.kind))
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("CheckCommand.name must be a non-empty string")
        if not isinstance(self.program, str) or not self.program.strip():
            raise ValueError("CheckCommand.program must be a non-empty string")
        if isinstance(self.args, (str, bytes)) or not isinstance(self.args, Sequence):
            raise TypeError("CheckCommand.args must be a sequence of strings")
        args = tuple(self.args)
        for index, item in enumerate(args):
            if not isinstance(item, str):
                raise TypeError(f"CheckCommand.args[{index}] must be a string")
        object.__setattr__(self, "args", args)

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.program, *self.args)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "program": self.program,
            "args": list(self.args),
        }


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Outcome of one verification call."""

    ran: bool
    ok: bool
    kind: CheckKind | None = None
    name: str | None = None
    output: str | None = None

    def __post_init__(self) -> None:
        if self.kind is not None:
            object.__setattr__(self, "kind", CheckKind(self.kind))
        if not self.ran:
            if not self.ok:
                raise ValueError("CheckResult.ok must be true when no check ran")
            if self.kind is not None or self.name is not None or self.output is not None:
                raise ValueError("CheckResult without a run must not carry kind, name, or output")

    @classmethod
    def not_run(cls) -> CheckResult:
        """No check was available; the caller should fall back to model review."""

        return cls(ran=False, ok=True)

    @classmethod
    def completed(cls, command: CheckCommand, *, ok: bool, output: str) -> CheckResult:
        return cls(ran=True, ok=ok, kind=command.kind, name=command.name, output=output)

    @property
    def failed(self) -> bool:
        return self.ran and not self.ok

    def to_dict(self) -> dict[str, object]:
        """Stable-key JSON-safe export; absent fields are omitted."""

        payload: dict[str, object] = {"ran": self.ran, "ok": self.ok}
        if self.kind is not None:
            payload["kind"] = self.kind.value
        if self.name is not None:
            payload["name"] = self.name
        if self.output is not None:
            payload["output"] = self.output
        return payload


__all__ = [
    "CHECK_KIND_PRIORITY",
    "CheckCommand",
    "CheckKind",
    "CheckResult",
    "check_kind_rank",
]
