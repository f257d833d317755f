"""
x3d-validator — unit tests for the process entrypoint

File: tests/unit/test_main.py
Last updated: 2026-10-19

Purpose
- Validate exit-code normalization at the CLI boundary.
"""

from __future__ import annotations

import pytest

from x3d_validator import main as main_module
from x3d_validator.domain.errors import InputUnreadableError, UsageError
from x3d_validator.main import ExitCode, cli_entrypoint


def _raise(exc: BaseException):
    def _run(_argv: object) -> int:
        raise exc

    return _run


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (UsageError("conflicting flags"), ExitCode.USAGE_ERROR),
        (InputUnreadableError("gone"), ExitCode.INPUT_UNREADABLE),
        (PermissionError("denied"), ExitCode.INPUT_UNREADABLE),
        (RuntimeError("bug"), ExitCode.INTERNAL_ERROR),
    ],
)
def test_exceptions_map_to_exit_codes(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    exc: BaseException,
    expected: ExitCode,
) -> None:
    monkeypatch.setattr("x3d_validator.ui.cli.run_cli", _raise(exc))

    assert cli_entrypoint([]) == expected
    assert capsys.readouterr().err


def test_chained_cause_is_routed(monkeypatch: pytest.MonkeyPatch) -> None:
    try:
        try:
            raise InputUnreadableError("gone")
        except InputUnreadableError as inner:
            raise RuntimeError("wrapped") from inner
    except RuntimeError as outer:
        wrapped = outer

    monkeypatch.setattr("x3d_validator.ui.cli.run_cli", _raise(wrapped))

    assert cli_entrypoint([]) == ExitCode.INPUT_UNREADABLE


def test_argparse_usage_error_returns_two(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["no-such-command"]) == ExitCode.USAGE_ERROR
    assert "usage:" in capsys.readouterr().err


def test_unknown_exit_codes_become_internal_error() -> None:
    assert main_module._normalize_exit_code(None) == ExitCode.SUCCESS
    assert main_module._normalize_exit_code(17) == ExitCode.INTERNAL_ERROR
