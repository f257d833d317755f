"""
x3d-validator — validation report assembly

File: src/x3d_validator/pipeline/report.py
Last updated: 2026-10-19

Purpose
- Accumulates the numbered, human-readable report text and renders the
  optional HTML view through a jinja2 template.

Functional requirements
- Steps are numbered consecutively from 1 in execution order; skipped stages
  never consume a number.
- Failing stages are announced with the "Error(s) detected" line before the
  ``<name>: fail.`` marker.
- Captured faults render as ``Internal error caught:`` followed by the
  exception class name and message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from jinja2 import Environment, PackageLoader, StrictUndefined

from x3d_validator.constants import REFERENCE_URL_AUTHORING_SUPPORT
from x3d_validator.domain.models import CheckResult, CheckStatus, JSONValue, StageFault

ERROR_DETECTED_LINE: Final[str] = "Error(s) detected during this validation test."
INTERNAL_ERROR_LINE: Final[str] = "Internal error caught:"
HTML_TEMPLATE_NAME: Final[str] = "report.html.j2"


def header_line(document_name: str) -> str:
    return f"--------- Commence validation checks for {document_name} ---------"


def footer_line(document_name: str) -> str:
    return f"--------- Validation checks complete for {document_name} ---------"


class ReportBuilder:
    """Append-only text buffer with a step counter."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._step = 0

    @property
    def step(self) -> int:
        return self._step

    def append(self, text: str) -> None:
        if not text:
            return
        self._parts.append(text if text.endswith("\n") else f"{text}\n")

    def header(self, document_name: str) -> None:
        self._parts.append(f"\n{header_line(document_name)}\n")

    def start(self, name: str) -> int:
        self._step += 1
        self._parts.append(f"\n{self._step}. Performing {name}...\n")
        return self._step

    def results(self, name: str, error: bool) -> None:
        if error:
            self._parts.append(f"{ERROR_DETECTED_LINE}\n")
        self._parts.append(f"{name}: {'fail' if error else 'pass'}.\n")

    def fault(self, fault: StageFault, name: str) -> None:
        self._parts.append(f"{INTERNAL_ERROR_LINE}\n{fault.render()}\n")
        self.results(name, True)

    def footer(self, document_name: str) -> None:
        self._parts.append(f"\n{footer_line(document_name)}\n")
        self._parts.append(
            "\nThe Authoring Support section of the X3D Resources page lists numerous "
            f"additional resources for authoring X3D: {REFERENCE_URL_AUTHORING_SUPPORT}\n"
        )

    def text(self) -> str:
        return "".join(self._parts)


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Finished pipeline run: report text plus the per-stage results behind it."""

    document_name: str
    text: str
    results: tuple[CheckResult, ...] = field(default_factory=tuple)
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def failed_stages(self) -> tuple[CheckResult, ...]:
        return tuple(result for result in self.results if result.status is CheckStatus.FAIL)

    @property
    def passed(self) -> bool:
        return not self.failed_stages

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "document_name": self.document_name,
            "passed": self.passed,
            "notes": list(self.notes),
            "results": [result.to_dict() for result in self.results],
        }


def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("x3d_validator", "templates"),
        undefined=StrictUndefined,
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_html(report: ValidationReport) -> str:
    """Render ``report`` as a standalone HTML page; every value is escaped."""

    template = _environment().get_template(HTML_TEMPLATE_NAME)
    return template.render(
        document_name=report.document_name,
        header=header_line(report.document_name),
        footer=footer_line(report.document_name),
        notes=report.notes,
        results=[result for result in report.results if result.status is not CheckStatus.SKIP],
        passed=report.passed,
        error_line=ERROR_DETECTED_LINE,
        internal_error_line=INTERNAL_ERROR_LINE,
        authoring_support_url=REFERENCE_URL_AUTHORING_SUPPORT,
    )


__all__ = [
    "ERROR_DETECTED_LINE",
    "INTERNAL_ERROR_LINE",
    "ReportBuilder",
    "ValidationReport",
    "footer_line",
    "header_line",
    "render_html",
]
