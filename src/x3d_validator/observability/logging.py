"""Structured logging setup with stderr and JSON-lines output and redaction support."""

from __future__ import annotations

import json
import logging
import math
import re
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

import structlog

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
LogRedactor = Callable[[JSONValue], JSONValue]

_REDACTED_VALUE: Final[str] = "***REDACTED***"
_DEFAULT_LOG_FILENAME: Final[str] = "x3d_validator.jsonl"
_DEFAULT_LOGGER_NAME: Final[str] = "x3d_validator"

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "api_key",
    "authorization",
    "credential",
)

_SENSITIVE_ASSIGNMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_BEARER_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*")

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)

_ACTIVE_HANDLE: LoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for stderr plus optional JSON-lines file logging."""

    level: int | str = "WARNING"
    log_dir: Path | str | None = None
    json_logs: bool = False
    logger_name: str = _DEFAULT_LOGGER_NAME
    log_filename: str = _DEFAULT_LOG_FILENAME
    redactor: LogRedactor | None = None


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def __init__(self, *, redactor: LogRedactor) -> None:
        super().__init__()
        self._redactor = redactor

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": _coerce_log_message(
                self._redactor(_normalize_json_value(record.getMessage()))
            ),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = self._redactor(_normalize_json_value(extras))

        if record.exc_info is not None:
            event["exception"] = _coerce_log_message(
                self._redactor(_normalize_json_value(self.formatException(record.exc_info)))
            )

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class _KeyValueFormatter(logging.Formatter):
    """Human-oriented ``LEVEL logger: event key=value`` lines for stderr."""

    def __init__(self, *, redactor: LogRedactor) -> None:
        super().__init__()
        self._redactor = redactor

    def format(self, record: logging.LogRecord) -> str:
        message = _coerce_log_message(self._redactor(_normalize_json_value(record.getMessage())))
        parts = [f"{record.levelname} {record.name}: {message}"]
        extras = self._redactor(_normalize_json_value(_extract_extra_fields(record)))
        if isinstance(extras, dict):
            for key in sorted(extras):
                parts.append(f"{key}={_coerce_log_message(extras[key])}")
        rendered = " ".join(parts)
        if record.exc_info is not None:
            rendered = f"{rendered}\n{self.formatException(record.exc_info)}"
        return rendered


@dataclass(slots=True)
class LoggingHandle:
    """Runtime handle for an active logging setup."""

    logger: logging.Logger
    handlers: tuple[logging.Handler, ...]
    log_path: Path | None = None
    is_shutdown: bool = False

    def flush(self) -> None:
        for handler in self.handlers:
            handler.flush()

    def shutdown(self) -> None:
        if self.is_shutdown:
            return
        for handler in self.handlers:
            handler.flush()
            self.logger.removeHandler(handler)
            handler.close()
        self.is_shutdown = True


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    logger_name: str = _DEFAULT_LOGGER_NAME,
) -> LoggingHandle:
    """Configure logging from an ``[observability]`` mapping and return the handle.

    Parameters
    ----------
    observability_config:
        Mapping compatible with ``[observability]`` settings in ``x3d_validator.toml``.
    logger_name:
        Logger name to configure.
    """

    cfg = dict(observability_config or {})
    raw_level = cfg.get("log_level", "WARNING")
    level: int | str = raw_level if isinstance(raw_level, (int, str)) else "WARNING"
    raw_log_dir = cfg.get("log_dir")
    log_dir = raw_log_dir if isinstance(raw_log_dir, (Path, str)) and raw_log_dir else None
    return setup_structured_logging(
        LoggingConfig(
            level=level,
            log_dir=log_dir,
            json_logs=bool(cfg.get("json_logs", False)),
            logger_name=logger_name,
        )
    )


def setup_structured_logging(config: LoggingConfig) -> LoggingHandle:
    """Attach stderr and optional file handlers, then route structlog through them."""

    shutdown_logging()

    level = _parse_log_level(config.level)
    logger_name = _validate_logger_name(config.logger_name)
    redactor = config.redactor if config.redactor is not None else default_log_redactor

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    if config.json_logs:
        stderr_handler.setFormatter(_JsonLineFormatter(redactor=redactor))
    else:
        stderr_handler.setFormatter(_KeyValueFormatter(redactor=redactor))
    handlers: list[logging.Handler] = [stderr_handler]

    log_path: Path | None = None
    if config.log_dir is not None:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / _validate_log_filename(config.log_filename)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(_JsonLineFormatter(redactor=redactor))
        handlers.append(file_handler)

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    for handler in handlers:
        logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handle = LoggingHandle(logger=logger, handlers=tuple(handlers), log_path=log_path)
    global _ACTIVE_HANDLE
    _ACTIVE_HANDLE = handle
    return handle


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Close all sinks of ``handle`` (or of the active setup) and reset structlog."""

    global _ACTIVE_HANDLE
    resolved = handle if handle is not None else _ACTIVE_HANDLE
    if resolved is None:
        return
    resolved.shutdown()
    if _ACTIVE_HANDLE is resolved:
        _ACTIVE_HANDLE = None
        structlog.reset_defaults()


def get_active_logging_handle() -> LoggingHandle | None:
    return _ACTIVE_HANDLE


def default_log_redactor(value: JSONValue) -> JSONValue:
    """Default deep redaction for credential-looking keys and assignments."""

    return _redact_value(value, key_context=None)


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _validate_logger_name(logger_name: str) -> str:
    normalized = logger_name.strip()
    if not normalized:
        raise ValueError("logger_name must not be empty")
    return normalized


def _validate_log_filename(log_filename: str) -> str:
    normalized = log_filename.strip()
    if not normalized:
        raise ValueError("log_filename must not be empty")
    if Path(normalized).name != normalized:
        raise ValueError("log_filename must not include path separators")
    return normalized


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _coerce_log_message(value: JSONValue) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS:
            continue
        if key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None:
        return None
    if isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return _REDACTED_VALUE
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    return repr(value)


def _redact_value(value: JSONValue, *, key_context: str | None) -> JSONValue:
    if key_context is not None and _requires_redaction_for_key(key_context):
        return _REDACTED_VALUE

    if isinstance(value, str):
        return _redact_string(value)

    if isinstance(value, list):
        return [_redact_value(item, key_context=None) for item in value]

    if isinstance(value, dict):
        return {key: _redact_value(item, key_context=key) for key, item in value.items()}

    return value


def _requires_redaction_for_key(key: str) -> bool:
    key_lower = key.lower()
    return any(term in key_lower for term in _SENSITIVE_KEY_TERMS)


def _redact_string(text: str) -> str:
    redacted = _SENSITIVE_ASSIGNMENT_PATTERN.sub(
        lambda match: f"{match.group(1)}{match.group(2)}{_REDACTED_VALUE}", text
    )
    return _BEARER_TOKEN_PATTERN.sub(f"Bearer {_REDACTED_VALUE}", redacted)


__all__ = [
    "JSONScalar",
    "JSONValue",
    "LogRedactor",
    "LoggingConfig",
    "LoggingHandle",
    "default_log_redactor",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
