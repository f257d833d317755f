"""Output rendering abstraction for the x3d-validator CLI.

File: src/x3d_validator/ui/render.py
Last updated: 2026-10-19

Purpose
- Provide a thin rendering layer for CLI output on stdout.
- Respect NO_COLOR environment variable and --no-color CLI flag.

What should be included in this file
- CLIRenderer class with methods for common output patterns.
- Factory function to create a renderer with appropriate settings.

Functional requirements
- Plain-text rendering must always work; color is only added on a TTY.
- Reports are written verbatim so they stay byte-comparable across runs.
"""

from __future__ import annotations

import os
import sys
from typing import Final, TextIO

_GREEN: Final[str] = "\033[32m"
_RESET: Final[str] = "\033[0m"


def _color_allowed(no_color_flag: bool, stream: TextIO) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces clean, deterministic plain-text output.
    Respects ``NO_COLOR`` env var and ``--no-color`` flag.
    """

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stream = stream if stream is not None else sys.stdout
        self._color = _color_allowed(no_color, self._stream)

    def text(self, line: str) -> None:
        """Print a plain text line."""

        print(line, file=self._stream)

    def report(self, body: str) -> None:
        """Write a pre-formatted report body unchanged."""

        self._stream.write(body if body.endswith("\n") else f"{body}\n")

    def kv(self, key: str, value: object) -> None:
        """Print a key: value pair."""

        print(f"{key}: {value}", file=self._stream)

    def ok(self, label: str) -> None:
        """Print a passing check."""

        print(f"  {self._paint('OK', _GREEN)}  {label}", file=self._stream)

    def _paint(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{color}{text}{_RESET}"


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
