"""Module entrypoint for ``python -m commitwise``."""

from __future__ import annotations

from commitwise.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
