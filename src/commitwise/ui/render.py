"""
commitwise — terminal rendering for CLI output.

Purpose
- Render verification results, candidate listings, and diagnostics with
  ``rich``, honouring ``--no-color`` and the ``NO_COLOR`` convention.

Functional requirements
- Check output is printed verbatim: no markup interpretation, no highlighting.
- Machine-readable output bypasses the renderer entirely (see ``emit_json``).
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from typing import IO

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from commitwise.checks.models import CheckCommand, CheckResult
from commitwise.checks.selector import CheckSelection
from commitwise.project.context import ProjectContext


class CLIRenderer:
    """Thin wrapper over a ``rich`` console."""

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        file: IO[str] | None = None,
    ) -> None:
        self.verbose = verbose
        self.console = Console(
            file=file,
            no_color=no_color,
            highlight=False,
            soft_wrap=True,
        )

    def text(self, line: str) -> None:
        self.console.print(Text(line))

    def kv(self, key: str, value: object) -> None:
        self.console.print(f"[bold]{escape(key)}:[/bold] {escape(str(value))}")

    def section(self, title: str) -> None:
        self.console.print()
        self.console.print(Text(title, style="bold underline"))

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def check_result(self, result: CheckResult) -> None:
        """Render one verification outcome."""

        if not result.ran:
            self.console.print(
                "[cyan]No runnable check found[/cyan] in package.json; "
                "nothing was verified."
            )
            return

        name = escape(result.name or "check")
        kind = escape(result.kind.value if result.kind is not None else "check")
        if result.ok:
            self.console.print(f"[bold green]PASS[/bold green] {name} [dim]({kind})[/dim]")
        else:
            self.console.print(f"[bold red]FAIL[/bold red] {name} [dim]({kind})[/dim]")

        output = (result.output or "").rstrip()
        if output and (self.verbose or not result.ok):
            self.console.print()
            self.console.print(Text(output))
        elif not output and not result.ok:
            self.console.print(Text("(no output)", style="dim"))

    def candidates(
        self,
        selection: CheckSelection,
        context: ProjectContext,
    ) -> None:
        self.kv("package manager", selection.package_manager.value)
        self.kv("framework", context.framework.value)
        self.kv("language", context.language.value)

        if not selection.candidates:
            self.section("Candidates")
            self.text("(none)")
            return

        table = Table(title="Candidates", title_justify="left", show_edge=False)
        table.add_column("#", justify="right")
        table.add_column("kind")
        table.add_column("command")
        table.add_column("selected")
        for index, command in enumerate(selection.candidates, start=1):
            table.add_row(
                str(index),
                command.kind.value,
                escape(command.name),
                "*" if command == selection.selected else "",
            )
        self.console.print()
        self.console.print(table)


def candidates_payload(
    selection: CheckSelection,
    context: ProjectContext,
) -> dict[str, object]:
    """JSON-safe mirror of ``CLIRenderer.candidates``."""

    selected: CheckCommand | None = selection.selected
    return {
        "package_manager": selection.package_manager.value,
        "project": context.to_dict(),
        "candidates": [command.to_dict() for command in selection.candidates],
        "selected": selected.to_dict() if selected is not None else None,
    }


def emit_json(
    payload: Mapping[str, object] | Sequence[object],
    *,
    file: IO[str] | None = None,
) -> None:
    """Write ``payload`` as one deterministic JSON document."""

    stream = file if file is not None else sys.stdout
    stream.write(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    stream.write("\n")


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "candidates_payload", "create_renderer", "emit_json"]
