"""
x3d-validator config package public API.

File: src/x3d_validator/config/__init__.py
Last updated: 2026-10-19

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``x3d_validator.toml`` + ``X3DV_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from x3d_validator.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_BINDINGS,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    env_name,
    env_overrides,
    load_config,
    normalize_paths,
)
from x3d_validator.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    ValidatorConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_BINDINGS",
    "ENV_PREFIX",
    "PATH_FIELDS",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ValidatorConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "env_name",
    "env_overrides",
    "load_config",
    "merge_config",
    "normalize_paths",
    "validate_config",
]
