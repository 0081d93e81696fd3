"""Unit tests for config schema validation, merging, and redaction."""

from __future__ import annotations

import pytest

from commitwise.config.schema import (
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    redact_config,
    validate_config,
)


def _paths(result: object) -> list[str]:
    return [issue.path for issue in result.issues]  # type: ignore[attr-defined]


def test_defaults_are_valid() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert result.config == default_config()


def test_default_config_returns_independent_copies() -> None:
    first = default_config()
    first["verification"]["link_dependencies"] = False

    assert default_config()["verification"]["link_dependencies"] is True


def test_merge_is_deep_and_does_not_mutate_inputs() -> None:
    base = default_config()
    overlay = {"verification": {"check_timeout_seconds": 5}}

    merged = merge_config(base, overlay)

    assert merged["verification"]["check_timeout_seconds"] == 5
    assert merged["verification"]["install_dependencies"] is True
    assert base["verification"]["check_timeout_seconds"] == 0.0


def test_embedded_secret_is_rejected_with_guidance() -> None:
    config = merge_config(default_config(), {"review": {"api_key": "sk-live"}})

    result = validate_config(config)

    assert not result.is_valid
    (issue,) = result.issues
    assert issue.path == "review.api_key"
    assert "environment variables" in issue.message
    assert "sk-live" not in issue.message


@pytest.mark.parametrize(
    ("overlay", "path"),
    [
        ({"verification": {"check_timeout_seconds": -1}}, "verification.check_timeout_seconds"),
        ({"verification": {"install_timeout_seconds": "10"}}, "verification.install_timeout_seconds"),
        ({"verification": {"link_dependencies": "yes"}}, "verification.link_dependencies"),
        ({"logging": {"level": "LOUD"}}, "logging.level"),
        ({"review": {"scan_enabled": "yes"}}, "review.scan_enabled"),
        ({"review": {"max_diff_chars": 0}}, "review.max_diff_chars"),
        ({"review": {"max_check_output_chars": True}}, "review.max_check_output_chars"),
        ({"review": {"max_issues_displayed": -1}}, "review.max_issues_displayed"),
        ({"meta": {"schema_version": 2}}, "meta.schema_version"),
        ({"extra": {}}, "extra"),
    ],
)
def test_invalid_values_report_their_path(overlay: dict[str, object], path: str) -> None:
    result = validate_config(merge_config(default_config(), overlay))

    assert _paths(result) == [path]


def test_missing_section_is_reported() -> None:
    config = default_config()
    del config["logging"]  # type: ignore[misc]

    assert _paths(validate_config(config)) == ["logging"]


def test_non_mapping_root_is_rejected() -> None:
    with pytest.raises(ConfigValidationError, match="<root>"):
        assert_valid_config(["not", "a", "table"])


def test_level_is_normalized_to_upper_case() -> None:
    config = merge_config(default_config(), {"logging": {"level": " info "}})

    assert assert_valid_config(config)["logging"]["level"] == "INFO"


def test_redaction_masks_sensitive_keys_only() -> None:
    payload = {"review": {"accessToken": "x", "client_secret": "y", "max_diff_chars": 10}}

    redacted = redact_config(payload)

    assert redacted == {
        "review": {"accessToken": "<redacted>", "client_secret": "<redacted>", "max_diff_chars": 10}
    }
    assert redact_config("nope") == {}
