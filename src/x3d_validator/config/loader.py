"""
x3d-validator — runtime config loader.

File: src/x3d_validator/config/loader.py
Last updated: 2026-10-19

Purpose
- Load effective runtime config from defaults, TOML file, env vars, and CLI overrides.

What should be included in this file
- Precedence logic: CLI > env (X3DV_) > file > defaults.
- TOML loading via ``tomllib``.
- Deterministic environment variable mapping and coercion.
- Path normalization relative to config file location.

Functional requirements
- Reject invalid config via schema validation.
- A missing default config file is not an error; a missing explicit one is.

Non-functional requirements
- Keep loading deterministic and reproducible.
"""

from __future__ import annotations

import json
import os
import shlex
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from x3d_validator.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "x3d_validator.toml"
ENV_PREFIX: Final[str] = "X3DV_"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ValueKind = Literal["str", "float", "bool", "argv"]

# Every setting that can be overridden from the environment, keyed by config path.
# ``X3DV_<SECTION>_<FIELD>`` names are derived from the path.
ENV_BINDINGS: Final[dict[tuple[str, str], _ValueKind]] = {
    ("validation", "allow_network"): "bool",
    ("validation", "schema_path"): "str",
    ("transforms", "engine"): "str",
    ("transforms", "stylesheet_dir"): "str",
    ("transforms", "command"): "argv",
    ("transforms", "timeout_seconds"): "float",
    ("transforms", "pretty_print_tidy_output"): "bool",
    ("report", "format"): "str",
    ("report", "verbose"): "bool",
    ("observability", "log_level"): "str",
    ("observability", "log_dir"): "str",
    ("observability", "json_logs"): "bool",
}


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective config with deterministic precedence: CLI > env > file > defaults.

    ``cli_overrides`` uses dotted keys (``"transforms.timeout_seconds"``); ``None``
    values mean the option was not given and are ignored.
    """

    resolved_path = _resolve_config_path(config_path)
    file_payload = _load_toml_file(resolved_path, required=config_path is not None)

    merged = assert_valid_config(merge_config(default_config(), file_payload))
    merged = merge_config(merged, env_overrides(os.environ if environ is None else environ))
    merged = merge_config(merged, _dotted_overrides(cli_overrides or {}))
    merged = assert_valid_config(merged)

    return assert_valid_config(normalize_paths(merged, base_dir=resolved_path.parent))


def env_name(path: tuple[str, str]) -> str:
    return ENV_PREFIX + "_".join(part.upper() for part in path)


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``X3DV_*`` overrides present in ``environ`` as a nested payload."""

    overrides: dict[str, Any] = {}
    for path, kind in sorted(ENV_BINDINGS.items()):
        name = env_name(path)
        raw = environ.get(name)
        if raw is None:
            continue
        section, key = path
        overrides.setdefault(section, {})[key] = _coerce_env(raw.strip(), kind, name)
    return overrides


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve configured paths against ``base_dir``; empty paths stay unset."""

    materialized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        value = materialized.get(section, {}).get(key)
        if isinstance(value, str) and value:
            materialized[section][key] = _normalize_one_path(value, base_dir)
    return materialized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return deterministic JSON dump of the effective config."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _coerce_env(value: str, kind: _ValueKind, name: str) -> object:
    if kind == "str":
        return value
    if kind == "argv":
        try:
            return shlex.split(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be a shell-style argument list: {exc}") from exc
    if kind == "float":
        try:
            return float(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be a number, got {value!r}") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")


def _dotted_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key, value in sorted(cli_overrides.items()):
        if value is None:
            continue
        section, _, field = key.partition(".")
        if not section or not field:
            raise ConfigLoadError(f"invalid CLI override key {key!r}, expected 'section.field'")
        payload.setdefault(section, {})[field] = value
    return payload


def _normalize_one_path(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(str(candidate))).as_posix()


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ENV_BINDINGS",
    "ENV_PREFIX",
    "ConfigLoadError",
    "dump_effective_config",
    "env_name",
    "env_overrides",
    "load_config",
    "normalize_paths",
]
