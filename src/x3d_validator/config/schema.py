"""
x3d-validator — configuration schema and validation.

File: src/x3d_validator/config/schema.py
Last updated: 2026-10-19

Purpose
- Define authoritative configuration defaults and strict validation rules.

What should be included in this file
- Validation rules for required fields, types, enums, and numeric constraints.
- Deterministic deep-merge helpers used by the loader.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Reject unknown sections and fields instead of silently ignoring them.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

TRANSFORM_ENGINES: Final[tuple[str, ...]] = ("lxml", "command")
REPORT_FORMATS: Final[tuple[str, ...]] = ("text", "html")
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
COMMAND_TOKENS: Final[tuple[str, ...]] = ("{source}", "{stylesheet}")

# Config paths that should be normalized relative to config file location.
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (
    ("validation", "schema_path"),
    ("transforms", "stylesheet_dir"),
    ("observability", "log_dir"),
)


class ValidationConfig(TypedDict):
    allow_network: bool
    schema_path: str


class TransformsConfig(TypedDict):
    engine: Literal["lxml", "command"]
    stylesheet_dir: str
    command: list[str]
    timeout_seconds: float
    pretty_print_tidy_output: bool


class ReportConfig(TypedDict):
    format: Literal["text", "html"]
    verbose: bool


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    json_logs: bool


class ValidatorConfig(TypedDict):
    validation: ValidationConfig
    transforms: TransformsConfig
    report: ReportConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[ValidatorConfig] = {
    "validation": {
        "allow_network": False,
        "schema_path": "",
    },
    "transforms": {
        "engine": "lxml",
        "stylesheet_dir": "stylesheets",
        "command": [],
        "timeout_seconds": 120.0,
        "pretty_print_tidy_output": False,
    },
    "report": {
        "format": "text",
        "verbose": False,
    },
    "observability": {
        "log_level": "WARNING",
        "log_dir": "",
        "json_logs": False,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> ValidatorConfig:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {"validation", "transforms", "report", "observability"}
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed, "", issues)

    out: dict[str, Any] = {}
    _section(payload, key="validation", issues=issues, validator=_validate_validation, out=out)
    _section(payload, key="transforms", issues=issues, validator=_validate_transforms, out=out)
    _section(payload, key="report", issues=issues, validator=_validate_report, out=out)
    _section(
        payload,
        key="observability",
        issues=issues,
        validator=_validate_observability,
        out=out,
    )
    return out


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_obj = _as_object(raw, key, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, key, issues)


def _validate_validation(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
) -> dict[str, Any]:
    allowed = {"allow_network", "schema_path"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "allow_network" in payload:
        parsed = _as_bool(payload["allow_network"], _join(path, "allow_network"), issues)
        if parsed is not None:
            out["allow_network"] = parsed
    if "schema_path" in payload:
        parsed_path = _as_optional_path_text(
            payload["schema_path"], _join(path, "schema_path"), issues
        )
        if parsed_path is not None:
            out["schema_path"] = parsed_path
    return out


def _validate_transforms(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
) -> dict[str, Any]:
    allowed = {
        "engine",
        "stylesheet_dir",
        "command",
        "timeout_seconds",
        "pretty_print_tidy_output",
    }
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "engine" in payload:
        parsed_engine = _as_enum(
            payload["engine"],
            _join(path, "engine"),
            issues,
            allowed_values=TRANSFORM_ENGINES,
        )
        if parsed_engine is not None:
            out["engine"] = parsed_engine

    if "stylesheet_dir" in payload:
        parsed_dir = _as_path_text(payload["stylesheet_dir"], _join(path, "stylesheet_dir"), issues)
        if parsed_dir is not None:
            out["stylesheet_dir"] = parsed_dir

    if "command" in payload:
        parsed_command = _as_str_list(payload["command"], _join(path, "command"), issues)
        if parsed_command is not None:
            out["command"] = parsed_command

    if "timeout_seconds" in payload:
        parsed_timeout = _as_float(
            payload["timeout_seconds"],
            _join(path, "timeout_seconds"),
            issues,
            minimum=0.001,
        )
        if parsed_timeout is not None:
            out["timeout_seconds"] = parsed_timeout

    if "pretty_print_tidy_output" in payload:
        parsed_flag = _as_bool(
            payload["pretty_print_tidy_output"],
            _join(path, "pretty_print_tidy_output"),
            issues,
        )
        if parsed_flag is not None:
            out["pretty_print_tidy_output"] = parsed_flag

    if out.get("engine") == "command":
        command = out.get("command")
        if not command:
            issues.add(_join(path, "command"), "required when engine is 'command'")
        else:
            for token in COMMAND_TOKENS:
                if not any(token in argument for argument in command):
                    issues.add(_join(path, "command"), f"template must reference {token}")

    return out


def _validate_report(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
) -> dict[str, Any]:
    allowed = {"format", "verbose"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "format" in payload:
        parsed_format = _as_enum(
            payload["format"],
            _join(path, "format"),
            issues,
            allowed_values=REPORT_FORMATS,
        )
        if parsed_format is not None:
            out["format"] = parsed_format
    if "verbose" in payload:
        parsed_verbose = _as_bool(payload["verbose"], _join(path, "verbose"), issues)
        if parsed_verbose is not None:
            out["verbose"] = parsed_verbose
    return out


def _validate_observability(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
) -> dict[str, Any]:
    allowed = {"log_level", "log_dir", "json_logs"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "log_level" in payload:
        raw_level = payload["log_level"]
        if isinstance(raw_level, str):
            raw_level = raw_level.strip().upper()
        parsed_log_level = _as_enum(
            raw_level,
            _join(path, "log_level"),
            issues,
            allowed_values=LOG_LEVELS,
        )
        if parsed_log_level is not None:
            out["log_level"] = parsed_log_level

    if "log_dir" in payload:
        parsed_log_dir = _as_optional_path_text(payload["log_dir"], _join(path, "log_dir"), issues)
        if parsed_log_dir is not None:
            out["log_dir"] = parsed_log_dir

    if "json_logs" in payload:
        parsed_json = _as_bool(payload["json_logs"], _join(path, "json_logs"), issues)
        if parsed_json is not None:
            out["json_logs"] = parsed_json

    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_optional_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    """Path text where the empty string means "not configured"."""

    if isinstance(value, str) and not value.strip():
        return ""
    return _as_path_text(value, path, issues)


def _as_str_list(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    if not isinstance(value, (list, tuple)):
        issues.add(path, f"expected array of strings, got {type(value).__name__}")
        return None
    out: list[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str) or not item:
            issues.add(f"{path}[{index}]", "expected non-empty string")
            return None
        out.append(item)
    return out


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_float(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: float | None = None,
) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {type(value).__name__}")
        return None
    parsed = float(value)
    if not math.isfinite(parsed):
        issues.add(path, "must be finite")
        return None
    if minimum is not None and parsed < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return parsed


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            elif isinstance(existing, Mapping):
                nested = _deep_copy_mapping(existing)
                _merge_into(nested, value)
                target[key] = nested
            else:
                nested_new: dict[str, Any] = {}
                _merge_into(nested_new, value)
                target[key] = nested_new
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value):
        out[key] = _deep_copy_value(value[key])
    return out


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(key, str):
                out[key] = _deep_copy_value(item)
        return out
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_deep_copy_value(item) for item in value)
    return copy.deepcopy(value)


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "REPORT_FORMATS",
    "TRANSFORM_ENGINES",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ValidatorConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
