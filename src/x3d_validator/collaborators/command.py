"""
x3d-validator — external XSLT processor adapter

File: src/x3d_validator/collaborators/command.py
Last updated: 2026-10-19

Purpose
- Runs stylesheets through an external command (for example an XSLT 2.0
  processor) configured as an argv template.

Functional requirements
- Template tokens ``{source}``, ``{stylesheet}`` and ``{output}`` are
  substituted per argument; ``{params}`` expands to one ``name=value`` argument
  per stylesheet parameter.
- Output is read from the ``{output}`` file when the template names one,
  otherwise from stdout.
- A non-zero exit code or a timeout marks the outcome as an error; stderr lines
  become messages.

Non-functional requirements
- No shell: argv is passed to ``subprocess.run`` as a list.
- The temporary output file is removed on every exit path.
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import structlog

from x3d_validator.collaborators.base import TransformOutcome
from x3d_validator.domain.errors import CollaboratorError
from x3d_validator.utils.fs import scoped_temp_file

PARAMS_TOKEN: Final[str] = "{params}"
_OUTPUT_TOKEN: Final[str] = "{output}"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured result of one external process invocation."""

    argv: tuple[str, ...]
    exit_code: int | None
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False

    @property
    def is_success(self) -> bool:
        return not self.timed_out and self.exit_code == 0


def expand_argv(
    template: Sequence[str],
    *,
    source: Path,
    stylesheet: Path,
    output: Path,
    parameters: Mapping[str, str] | None = None,
) -> tuple[str, ...]:
    """Substitute template tokens; ``{params}`` must stand alone as one argument."""

    argv: list[str] = []
    for token in template:
        if token == PARAMS_TOKEN:
            argv.extend(f"{name}={value}" for name, value in (parameters or {}).items())
            continue
        argv.append(
            token.replace("{source}", str(source))
            .replace("{stylesheet}", str(stylesheet))
            .replace(_OUTPUT_TOKEN, str(output))
        )
    return tuple(argv)


def run_command(argv: Sequence[str], *, timeout_seconds: float) -> CommandResult:
    started = time.monotonic()
    try:
        proc = subprocess.run(
            list(argv),
            check=False,
            text=True,
            capture_output=True,
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired as exc:
        return CommandResult(
            argv=tuple(argv),
            exit_code=None,
            stdout=_decode(exc.stdout),
            stderr=_decode(exc.stderr),
            duration_ms=_elapsed_ms(started),
            timed_out=True,
        )
    except OSError as exc:
        raise CollaboratorError(f"unable to start transform command {argv[0]!r}: {exc}") from exc
    return CommandResult(
        argv=tuple(argv),
        exit_code=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration_ms=_elapsed_ms(started),
    )


class CommandTransformationService:
    """``TransformationService`` backed by an external XSLT processor."""

    def __init__(
        self,
        argv_template: Sequence[str],
        stylesheet_dir: Path,
        *,
        timeout_seconds: float = 120.0,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if not argv_template:
            raise CollaboratorError("transform command template is empty")
        self._template = tuple(argv_template)
        self._stylesheet_dir = stylesheet_dir
        self._timeout_seconds = timeout_seconds
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def transform(
        self,
        path: Path,
        stylesheet: str,
        parameters: Mapping[str, str] | None = None,
    ) -> TransformOutcome:
        stylesheet_path = self._stylesheet_dir / stylesheet
        if not stylesheet_path.is_file():
            raise CollaboratorError(f"stylesheet not found: {stylesheet_path}")

        uses_output_file = any(_OUTPUT_TOKEN in token for token in self._template)
        with scoped_temp_file("", prefix="x3dv-transform-", suffix=".out") as output_path:
            argv = expand_argv(
                self._template,
                source=path,
                stylesheet=stylesheet_path,
                output=output_path,
                parameters=parameters,
            )
            result = run_command(argv, timeout_seconds=self._timeout_seconds)
            self._logger.debug(
                "transform_command_finished",
                stylesheet=stylesheet,
                exit_code=result.exit_code,
                timed_out=result.timed_out,
                duration_ms=result.duration_ms,
            )
            if uses_output_file:
                output = output_path.read_text(encoding="utf-8", errors="replace")
            else:
                output = result.stdout

        messages = [line for line in result.stderr.splitlines() if line.strip()]
        if result.timed_out:
            messages.append(f"transform command timed out after {self._timeout_seconds:g} seconds")
        elif result.exit_code != 0:
            messages.append(f"transform command exited with code {result.exit_code}")
        return TransformOutcome(
            error=not result.is_success,
            output=output if result.is_success else "",
            messages=tuple(messages),
        )


def _decode(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


__all__ = [
    "PARAMS_TOKEN",
    "CommandResult",
    "CommandTransformationService",
    "expand_argv",
    "run_command",
]
