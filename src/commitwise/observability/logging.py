"""Logging setup for the CLI: stderr output, optional JSON-lines file, secret redaction."""

from __future__ import annotations

import json
import logging
import re
import sys
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Final

from commitwise.constants import LOGGER_NAME

_REDACTED_VALUE: Final[str] = "***REDACTED***"
_DEFAULT_LOG_FILENAME: Final[str] = "commitwise.jsonl"
_HUMAN_FORMAT: Final[str] = "%(levelname)s %(name)s: %(message)s"

_SENSITIVE_ASSIGNMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|client_secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_BEARER_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*")
_ANTHROPIC_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bsk-ant-[A-Za-z0-9_-]{12,}\b")
_OPENAI_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bsk-(?:proj-)?[A-Za-z0-9_-]{12,}\b")

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "api_key",
    "apikey",
    "authorization",
    "credential",
)

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

_ACTIVE_HANDLE_LOCK = threading.Lock()
_ACTIVE_HANDLE: LoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Resolved ``[logging]`` settings."""

    level: int | str = "WARNING"
    log_dir: Path | str | None = None
    json: bool = False
    logger_name: str = LOGGER_NAME
    log_filename: str = _DEFAULT_LOG_FILENAME


def redact_text(text: str) -> str:
    """Mask bearer tokens, provider API keys, and ``secret=value`` style assignments."""

    # Bearer first, or "Authorization: Bearer x" would only mask the word "Bearer".
    redacted = _BEARER_TOKEN_PATTERN.sub(f"Bearer {_REDACTED_VALUE}", text)
    redacted = _SENSITIVE_ASSIGNMENT_PATTERN.sub(
        lambda match: f"{match.group(1)}{match.group(2)}{_REDACTED_VALUE}", redacted
    )
    redacted = _ANTHROPIC_KEY_PATTERN.sub(_REDACTED_VALUE, redacted)
    return _OPENAI_KEY_PATTERN.sub(_REDACTED_VALUE, redacted)


class _RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return redact_text(super().format(record))


class _JsonLineFormatter(logging.Formatter):
    """One canonical JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, object] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_text(record.getMessage()),
        }
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOG_RECORD_FIELDS and not key.startswith("_")
        }
        if extras:
            event["fields"] = _redact_fields(extras)
        if record.exc_info is not None:
            event["exception"] = redact_text(self.formatException(record.exc_info))
        return json.dumps(
            event, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
        )


class LoggingHandle:
    """Handlers installed by one ``setup_logging`` call."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        handlers: tuple[logging.Handler, ...],
        log_path: Path | None,
        previous_level: int,
        previous_propagate: bool,
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._handlers = handlers
        self._previous_level = previous_level
        self._previous_propagate = previous_propagate
        self._is_shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def shutdown(self) -> None:
        if self._is_shutdown:
            return
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.flush()
            handler.close()
        self.logger.setLevel(self._previous_level)
        self.logger.propagate = self._previous_propagate
        self._is_shutdown = True


def setup_logging(config: LoggingConfig, *, stream: IO[str] | None = None) -> LoggingHandle:
    """Configure the ``commitwise`` logger tree, replacing any previous setup."""

    global _ACTIVE_HANDLE

    level = _parse_log_level(config.level)
    logger = logging.getLogger(config.logger_name)

    with _ACTIVE_HANDLE_LOCK:
        if _ACTIVE_HANDLE is not None:
            _ACTIVE_HANDLE.shutdown()
            _ACTIVE_HANDLE = None

        previous_level = logger.level
        previous_propagate = logger.propagate
        logger.setLevel(level)
        logger.propagate = False

        stderr_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        stderr_handler.setLevel(level)
        stderr_handler.setFormatter(
            _JsonLineFormatter() if config.json else _RedactingFormatter(_HUMAN_FORMAT)
        )
        handlers: list[logging.Handler] = [stderr_handler]

        log_path: Path | None = None
        if config.log_dir:
            log_dir = Path(config.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / config.log_filename
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            # The file sink always records everything at DEBUG and above.
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(_JsonLineFormatter())
            handlers.append(file_handler)
            logger.setLevel(logging.DEBUG)

        for handler in handlers:
            logger.addHandler(handler)

        handle = LoggingHandle(
            logger=logger,
            handlers=tuple(handlers),
            log_path=log_path,
            previous_level=previous_level,
            previous_propagate=previous_propagate,
        )
        _ACTIVE_HANDLE = handle
    return handle


def shutdown_logging() -> None:
    """Detach and close the handlers of the active setup, if any."""

    global _ACTIVE_HANDLE

    with _ACTIVE_HANDLE_LOCK:
        if _ACTIVE_HANDLE is not None:
            _ACTIVE_HANDLE.shutdown()
            _ACTIVE_HANDLE = None


def _redact_fields(value: object) -> object:
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return {
            str(key): _REDACTED_VALUE if _is_sensitive_key(str(key)) else _redact_fields(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact_fields(item) for item in value]
    if isinstance(value, Path):
        return str(value)
    return value


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(term in lowered for term in _SENSITIVE_KEY_TERMS)


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError("level must be int or str, got bool")
    if isinstance(value, int):
        return value
    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed
    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "redact_text",
    "setup_logging",
    "shutdown_logging",
]
