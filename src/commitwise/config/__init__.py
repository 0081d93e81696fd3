"""
commitwise — configuration package.

Layered TOML configuration (defaults, global file, project file, environment,
CLI) with strict validation, plus the typed settings the verification
components consume.
"""

from commitwise.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    effective_config,
    global_config_path,
    load_config,
)
from commitwise.config.schema import (
    DEFAULT_CONFIG,
    LOG_LEVELS,
    CommitwiseConfig,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    assert_valid_config,
    default_config,
    merge_config,
    redact_config,
    validate_config,
)
from commitwise.config.settings import (
    ReviewSettings,
    VerificationSettings,
    review_settings_from_config,
    settings_from_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "CommitwiseConfig",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ReviewSettings",
    "VerificationSettings",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "effective_config",
    "global_config_path",
    "load_config",
    "merge_config",
    "redact_config",
    "review_settings_from_config",
    "settings_from_config",
    "validate_config",
]
