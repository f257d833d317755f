"""
x3d-validator — unit tests for config loader

File: tests/unit/config/test_loader.py
Last updated: 2026-10-19

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Path normalization relative to the config file.
- Missing and malformed config files.

Functional requirements
- Works offline and never depends on the caller's working directory.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from x3d_validator.config import (
    ENV_BINDINGS,
    ConfigLoadError,
    ConfigValidationError,
    default_config,
    dump_effective_config,
    env_name,
    env_overrides,
    load_config,
)


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    default_path = tmp_path / "default.toml"
    _write_config(default_path, "")
    _write_config(
        config_path,
        """
[transforms]
timeout_seconds = 30.0
""".strip(),
    )

    default_loaded = load_config(default_path, environ={})
    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ={"X3DV_TRANSFORMS_TIMEOUT_SECONDS": "45"})
    cli_loaded = load_config(
        config_path,
        environ={"X3DV_TRANSFORMS_TIMEOUT_SECONDS": "45"},
        cli_overrides={"transforms.timeout_seconds": 60.0},
    )

    assert default_loaded["transforms"]["timeout_seconds"] == 120.0
    assert file_loaded["transforms"]["timeout_seconds"] == 30.0
    assert env_loaded["transforms"]["timeout_seconds"] == 45.0
    assert cli_loaded["transforms"]["timeout_seconds"] == 60.0


def test_none_cli_overrides_are_ignored(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, '[report]\nformat = "html"\n')

    loaded = load_config(config_path, environ={}, cli_overrides={"report.format": None})

    assert loaded["report"]["format"] == "html"


def test_env_mapping_coerces_booleans_and_argv(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, "")

    loaded = load_config(
        config_path,
        environ={
            "X3DV_VALIDATION_ALLOW_NETWORK": "yes",
            "X3DV_TRANSFORMS_ENGINE": "command",
            "X3DV_TRANSFORMS_COMMAND": "java -jar 'saxon he.jar' -s:{source} -xsl:{stylesheet}",
            "X3DV_OBSERVABILITY_LOG_LEVEL": "debug",
        },
    )

    assert loaded["validation"]["allow_network"] is True
    assert loaded["transforms"]["engine"] == "command"
    assert loaded["transforms"]["command"] == [
        "java",
        "-jar",
        "saxon he.jar",
        "-s:{source}",
        "-xsl:{stylesheet}",
    ]
    assert loaded["observability"]["log_level"] == "DEBUG"


def test_invalid_env_coercion_raises_actionable_error(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="X3DV_VALIDATION_ALLOW_NETWORK"):
        load_config(config_path, environ={"X3DV_VALIDATION_ALLOW_NETWORK": "maybe"})


def test_env_bindings_cover_every_default_setting() -> None:
    defaults = default_config()
    fields = {(section, key) for section, values in defaults.items() for key in values}

    assert set(ENV_BINDINGS) == fields
    assert env_name(("transforms", "timeout_seconds")) == "X3DV_TRANSFORMS_TIMEOUT_SECONDS"


def test_env_overrides_ignore_unbound_names() -> None:
    overrides = env_overrides(
        {"X3DV_REPORT_FORMAT": " html ", "X3DV_REPORT_COLOR": "yes", "HOME": "/root"}
    )

    assert overrides == {"report": {"format": "html"}}


def test_non_numeric_env_timeout_is_load_error(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="X3DV_TRANSFORMS_TIMEOUT_SECONDS must be a number"):
        load_config(config_path, environ={"X3DV_TRANSFORMS_TIMEOUT_SECONDS": "soon"})


def test_cli_override_without_section_is_load_error(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="expected 'section.field'"):
        load_config(config_path, environ={}, cli_overrides={"verbose": True})


def test_path_normalization_is_relative_to_config_file(tmp_path: Path) -> None:
    config_dir = tmp_path / "conf"
    config_path = config_dir / "x3d_validator.toml"
    _write_config(
        config_path,
        """
[validation]
schema_path = "schemas/x3d-4.0.xsd"

[transforms]
stylesheet_dir = "../xslt"
""".strip(),
    )

    loaded = load_config(config_path, environ={})

    assert loaded["validation"]["schema_path"] == (
        config_dir.resolve() / "schemas/x3d-4.0.xsd"
    ).as_posix()
    assert loaded["transforms"]["stylesheet_dir"] == (tmp_path.resolve() / "xslt").as_posix()
    assert loaded["observability"]["log_dir"] == ""


def test_missing_explicit_config_file_is_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


def test_missing_default_config_file_uses_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["transforms"]["engine"] == "lxml"
    assert loaded["transforms"]["stylesheet_dir"] == (
        tmp_path.resolve() / "stylesheets"
    ).as_posix()


def test_invalid_toml_is_load_error(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, "[report\nformat = ")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


def test_schema_violation_in_file_is_validation_error(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, '[report]\nformat = "pdf"\n')

    with pytest.raises(ConfigValidationError, match="report.format"):
        load_config(config_path, environ={})


def test_command_engine_without_template_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, '[transforms]\nengine = "command"\n')

    with pytest.raises(ConfigValidationError, match="required when engine is 'command'"):
        load_config(config_path, environ={})


def test_dump_effective_config_is_deterministic(tmp_path: Path) -> None:
    config_path = tmp_path / "x3d_validator.toml"
    _write_config(config_path, "")

    first = dump_effective_config(load_config(config_path, environ={}))
    second = dump_effective_config(load_config(config_path, environ={}))

    assert first == second
    assert set(json.loads(first)) == {"observability", "report", "transforms", "validation"}
