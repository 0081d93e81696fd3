"""Unit tests for CLI logging setup and redaction."""

from __future__ import annotations

import io
import json
import logging
from typing import TYPE_CHECKING

import pytest

from commitwise.observability.logging import (
    LoggingConfig,
    redact_text,
    setup_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()


def test_human_output_is_redacted_and_level_filtered() -> None:
    stream = io.StringIO()
    setup_logging(LoggingConfig(level="INFO"), stream=stream)
    logger = logging.getLogger("commitwise.tests.human")

    logger.debug("hidden detail")
    logger.info("sending header Bearer abc.def.ghi")
    logger.warning("key sk-abcdefghijklmnop1234 leaked")

    text = stream.getvalue()
    assert "hidden detail" not in text
    assert "abc.def.ghi" not in text
    assert "sk-abcdefghijklmnop1234" not in text
    assert "INFO commitwise.tests.human:" in text
    assert text.count("***REDACTED***") == 2


def test_json_output_one_object_per_line() -> None:
    stream = io.StringIO()
    setup_logging(LoggingConfig(level="DEBUG", json=True), stream=stream)
    logger = logging.getLogger("commitwise.tests.json")

    logger.debug("stage=%s", "isolating", extra={"password": "hunter2", "stage": "isolating"})

    (line,) = stream.getvalue().splitlines()
    event = json.loads(line)
    assert event["level"] == "DEBUG"
    assert event["logger"] == "commitwise.tests.json"
    assert event["message"] == "stage=isolating"
    assert event["fields"] == {"password": "***REDACTED***", "stage": "isolating"}
    assert event["timestamp"].endswith("Z")


def test_file_sink_records_debug_even_when_console_is_quiet(tmp_path: Path) -> None:
    stream = io.StringIO()
    handle = setup_logging(
        LoggingConfig(level="WARNING", log_dir=tmp_path / "logs"), stream=stream
    )
    logger = logging.getLogger("commitwise.tests.file")

    logger.debug("api_key=supersecretvalue in debug")
    shutdown_logging()

    assert stream.getvalue() == ""
    assert handle.log_path is not None
    (line,) = handle.log_path.read_text(encoding="utf-8").splitlines()
    assert json.loads(line)["message"] == "api_key=***REDACTED*** in debug"


def test_setup_replaces_previous_handlers_and_shutdown_restores() -> None:
    logger = logging.getLogger("commitwise")
    original_handlers = list(logger.handlers)
    original_propagate = logger.propagate

    first = setup_logging(LoggingConfig(), stream=io.StringIO())
    second = setup_logging(LoggingConfig(), stream=io.StringIO())

    assert first.is_shutdown
    assert len(logger.handlers) == len(original_handlers) + 1

    shutdown_logging()

    assert second.is_shutdown
    shutdown_logging()
    assert list(logger.handlers) == original_handlers
    assert logger.propagate == original_propagate


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        setup_logging(LoggingConfig(level="LOUD"))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("token=abc123", "token=***REDACTED***"),
        ("password: hunter2, next", "password:***REDACTED***, next"),
        ("sk-ant-abcdefghijklmnop", "***REDACTED***"),
        ("plain text", "plain text"),
    ],
)
def test_redact_text(raw: str, expected: str) -> None:
    assert redact_text(raw) == expected
