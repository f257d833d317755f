"""
x3d-validator — numeric literal anomaly detectors

File: src/x3d_validator/scanning/detectors.py
Last updated: 2026-10-19

Purpose
- Flag malformed float groups (missing whitespace between values, repeated
  decimal points or signs) and integers/floats written with leading zeroes.

Functional requirements
- Candidate tokens are bounded by whitespace, comma, double quote or apostrophe.
  Boundaries are matched with look-around so adjacent tokens are each reported.
- Findings are returned in increasing offset order with line/column from
  ``LineOffsetTable``.
- No findings render as the empty string, which the pipeline treats as a pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from x3d_validator.domain.models import Finding
from x3d_validator.scanning.positions import NOT_FOUND_DESCRIPTION, LineOffsetTable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from x3d_validator.domain.models import Document

_BOUNDARY_BEFORE: Final[str] = r"(?<=[\s,\"'])"
_BOUNDARY_AFTER: Final[str] = r"(?=[\s,\"'])"

MALFORMED_FLOAT_PATTERN: Final[re.Pattern[str]] = re.compile(
    _BOUNDARY_BEFORE
    + r"(?:"
    + r"[+-]?(?:\.\d+|\d+\.\d*)(?:[eE]?[+-]?\d+)?[.+-]+\d*"
    + r"|"
    + r"\d+(?:[+-]\d+)+"
    + r")"
    + _BOUNDARY_AFTER
)

LEADING_ZERO_PATTERN: Final[re.Pattern[str]] = re.compile(
    _BOUNDARY_BEFORE + r"[+-]?0\d+(?:\.\d*)?(?:[eE][+-]?\d+)?" + _BOUNDARY_AFTER
)


def detect_malformed_floats(
    text: str, table: LineOffsetTable | None = None
) -> tuple[Finding, ...]:
    return _scan(MALFORMED_FLOAT_PATTERN, text, table)


def detect_leading_zeroes(text: str, table: LineOffsetTable | None = None) -> tuple[Finding, ...]:
    return _scan(LEADING_ZERO_PATTERN, text, table)


def render_malformed_floats(findings: Sequence[Finding]) -> str:
    if not findings:
        return ""
    return f"Found {len(findings)} malformed float groups:\n" + _render_bullets(findings)


def render_leading_zeroes(findings: Sequence[Finding]) -> str:
    if not findings:
        return ""
    noun = "match" if len(findings) == 1 else "matches"
    return f"Found {len(findings)} leading-zero {noun}:\n" + _render_bullets(findings)


@dataclass(frozen=True, slots=True)
class ValuesScan:
    """Findings of both detectors over one document."""

    malformed_floats: tuple[Finding, ...]
    leading_zeroes: tuple[Finding, ...]

    @property
    def finding_count(self) -> int:
        return len(self.malformed_floats) + len(self.leading_zeroes)

    def render(self) -> str:
        return render_malformed_floats(self.malformed_floats) + render_leading_zeroes(
            self.leading_zeroes
        )


class ValuesRegexChecker:
    """Run the numeric literal detectors over a document without mutating it."""

    def __init__(self, document: Document) -> None:
        self._document = document
        self._table = LineOffsetTable.from_text(document.text)

    @property
    def table(self) -> LineOffsetTable:
        return self._table

    def scan(self) -> ValuesScan:
        text = self._document.text
        return ValuesScan(
            malformed_floats=detect_malformed_floats(text, self._table),
            leading_zeroes=detect_leading_zeroes(text, self._table),
        )

    def process(self) -> str:
        return self.scan().render()


def _scan(
    pattern: re.Pattern[str], text: str, table: LineOffsetTable | None
) -> tuple[Finding, ...]:
    offsets = table if table is not None else LineOffsetTable.from_text(text)
    findings: list[Finding] = []
    for match in pattern.finditer(text):
        located = offsets.try_locate(match.start())
        line, column = located if located is not None else (None, None)
        findings.append(
            Finding(
                start=match.start(),
                end=match.end(),
                text=match.group(0),
                line=line,
                column=column,
            )
        )
    return tuple(findings)


def _render_bullets(findings: Sequence[Finding]) -> str:
    lines: list[str] = []
    for finding in findings:
        if finding.located:
            where = f" in line {finding.line} column {finding.column}: "
        else:
            where = NOT_FOUND_DESCRIPTION
        lines.append(f"-{where}{finding.text}\n")
    return "".join(lines)


__all__ = [
    "LEADING_ZERO_PATTERN",
    "MALFORMED_FLOAT_PATTERN",
    "ValuesRegexChecker",
    "ValuesScan",
    "detect_leading_zeroes",
    "detect_malformed_floats",
    "render_leading_zeroes",
    "render_malformed_floats",
]
