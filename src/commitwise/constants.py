"""Stable constants shared across commitwise components."""

from __future__ import annotations

from typing import Final

# Project files inspected during check discovery.
MANIFEST_FILENAME: Final[str] = "package.json"
TSCONFIG_FILENAME: Final[str] = "tsconfig.json"
DEPENDENCY_DIR_NAME: Final[str] = "node_modules"

# Isolated workspace layout.
TEMP_DIR_PREFIX: Final[str] = "commitwise-"
WORKTREE_DIRNAME: Final[str] = "wt"
PATCH_FILENAME: Final[str] = "staged.patch"

# Configuration discovery.
PROJECT_CONFIG_FILENAME: Final[str] = ".commitwise.toml"
GLOBAL_CONFIG_DIRNAME: Final[str] = "commitwise"
GLOBAL_CONFIG_FILENAME: Final[str] = "config.toml"
ENV_PREFIX: Final[str] = "COMMITWISE_"
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Model review input bounds.
MAX_DIFF_CHARS: Final[int] = 50_000
MAX_CHECK_OUTPUT_CHARS: Final[int] = 15_000
MAX_ISSUES_TO_DISPLAY: Final[int] = 5

# Root logger namespace for every library module.
LOGGER_NAME: Final[str] = "commitwise"

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEPENDENCY_DIR_NAME",
    "ENV_PREFIX",
    "GLOBAL_CONFIG_DIRNAME",
    "GLOBAL_CONFIG_FILENAME",
    "LOGGER_NAME",
    "MANIFEST_FILENAME",
    "MAX_CHECK_OUTPUT_CHARS",
    "MAX_DIFF_CHARS",
    "MAX_ISSUES_TO_DISPLAY",
    "PATCH_FILENAME",
    "PROJECT_CONFIG_FILENAME",
    "TEMP_DIR_PREFIX",
    "TSCONFIG_FILENAME",
    "WORKTREE_DIRNAME",
]
