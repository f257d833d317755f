"""
x3d-validator — unit tests for config schema validation

File: tests/unit/config/test_schema.py
Last updated: 2026-10-19

Purpose
- Validate strict config shape checks and their structured issue paths.
"""

from __future__ import annotations

import pytest

from x3d_validator.config import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)


def test_default_config_validates_successfully() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert result.config == DEFAULT_CONFIG


def test_default_config_is_a_copy() -> None:
    config = default_config()
    config["transforms"]["command"].append("xslt")

    assert DEFAULT_CONFIG["transforms"]["command"] == []


def test_unknown_key_rejection_is_explicit() -> None:
    config = merge_config(default_config(), {"report": {"colour": "blue"}, "extras": {}})

    result = validate_config(config)

    assert not result.is_valid
    paths = {(issue.path, issue.message) for issue in result.issues}
    assert ("report.colour", "unknown field") in paths
    assert ("extras", "unknown field") in paths


def test_type_validation_reports_structured_paths() -> None:
    config = merge_config(
        default_config(),
        {
            "validation": {"allow_network": "yes"},
            "transforms": {"timeout_seconds": "fast"},
        },
    )

    with pytest.raises(ConfigValidationError) as exc_info:
        assert_valid_config(config)

    issues = {issue.path: issue.message for issue in exc_info.value.issues}
    assert issues["validation.allow_network"] == "expected boolean, got str"
    assert issues["transforms.timeout_seconds"] == "expected number, got str"
    assert str(exc_info.value).startswith("invalid config:\n- ")


def test_missing_section_field_is_reported() -> None:
    config = default_config()
    del config["report"]["verbose"]

    result = validate_config(config)

    assert [(issue.path, issue.message) for issue in result.issues] == [
        ("report.verbose", "missing required field")
    ]


def test_range_violation_reports_exact_path() -> None:
    config = merge_config(default_config(), {"transforms": {"timeout_seconds": 0}})

    result = validate_config(config)

    assert [issue.path for issue in result.issues] == ["transforms.timeout_seconds"]


def test_command_template_must_reference_source_and_stylesheet() -> None:
    config = merge_config(
        default_config(),
        {"transforms": {"engine": "command", "command": ["xslt", "{source}"]}},
    )

    result = validate_config(config)

    assert [(issue.path, issue.message) for issue in result.issues] == [
        ("transforms.command", "template must reference {stylesheet}")
    ]


def test_log_level_is_case_insensitive() -> None:
    config = merge_config(default_config(), {"observability": {"log_level": "info"}})

    assert assert_valid_config(config)["observability"]["log_level"] == "INFO"


def test_empty_optional_paths_are_allowed_but_stylesheet_dir_is_required() -> None:
    config = merge_config(
        default_config(),
        {"validation": {"schema_path": "  "}, "transforms": {"stylesheet_dir": ""}},
    )

    result = validate_config(config)

    assert [(issue.path, issue.message) for issue in result.issues] == [
        ("transforms.stylesheet_dir", "must not be empty")
    ]


def test_merge_config_is_deep_and_non_mutating() -> None:
    base = default_config()

    merged = merge_config(base, {"report": {"format": "html"}})

    assert merged["report"] == {"format": "html", "verbose": False}
    assert base["report"]["format"] == "text"
