"""
commitwise — filesystem utilities

Purpose
- Guarded deletion of ephemeral directories and directory linking for
  dependency sharing.

Functional requirements
- Deletion never follows symlinks: a linked dependency tree is unlinked, its
  target is left untouched.
- Deletion refuses paths outside the directory that owns them.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "is_within",
    "link_directory",
    "remove_tree",
]


def is_within(child: PathLike, parent: PathLike) -> bool:
    """Return ``True`` if ``child`` (symlinks in its parent resolved) is inside ``parent``."""

    resolved_parent = Path(parent).resolve(strict=False)
    candidate = Path(child)
    managed = candidate.parent.resolve(strict=False) / candidate.name
    try:
        managed.relative_to(resolved_parent)
    except ValueError:
        return False
    return managed != resolved_parent


def remove_tree(path: PathLike, *, owner: PathLike) -> None:
    """
    Delete ``path`` if it lives inside ``owner``.

    Symlinks are unlinked without traversing into their targets. Missing paths
    are ignored.
    """

    target = Path(path)
    if not is_within(target, owner):
        raise ValueError(f"refusing to delete path outside {owner!s}: {target!s}")

    if target.is_symlink():
        target.unlink()
        return
    if not target.exists():
        return
    if target.is_dir():
        shutil.rmtree(target)
        return
    target.unlink()


def link_directory(link_path: PathLike, target: PathLike) -> None:
    """Create ``link_path`` as a directory symlink pointing at ``target``."""

    resolved_target = Path(target).resolve(strict=True)
    if not resolved_target.is_dir():
        raise NotADirectoryError(f"{resolved_target!s} is not a directory")
    os.symlink(resolved_target, Path(link_path), target_is_directory=True)
