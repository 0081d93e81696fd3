"""Observability: logging configuration and secret redaction."""

from commitwise.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    redact_text,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "redact_text",
    "setup_logging",
    "shutdown_logging",
]
