"""
x3d-validator — collaborator interfaces

File: src/x3d_validator/collaborators/base.py
Last updated: 2026-10-19

Purpose
- Defines the validation and transformation service contracts the pipeline
  depends on, plus the outcome envelopes they return.

Functional requirements
- Services receive a filesystem path to the working copy of the scene.
- Diagnostics are returned as already-rendered text blocks so the pipeline can
  append them to the report verbatim.
- ``error`` is set only by error and fatal-error diagnostics; warnings are
  reported without failing the stage.

Non-functional requirements
- Structural typing only; concrete adapters do not inherit from these classes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Protocol, runtime_checkable


class DiagnosticSeverity(StrEnum):
    """Severity labels rendered into ``Error type:`` lines."""

    WARNING = "Warning"
    ERROR = "Error"
    FATAL = "Fatal error"

    @property
    def is_error(self) -> bool:
        return self is not DiagnosticSeverity.WARNING


def render_diagnostic(severity: DiagnosticSeverity, exception_type: str, message: str) -> str:
    """Render one parser diagnostic in the report's block layout."""

    return f"Error type: {severity.value}\n{exception_type}:\n{message}\n"


@dataclass(frozen=True, slots=True)
class ServiceOutcome:
    """Result of a well-formedness, DTD or schema check."""

    error: bool
    diagnostics: tuple[str, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return "".join(self.diagnostics)


@dataclass(frozen=True, slots=True)
class TransformOutcome:
    """Result of applying one stylesheet."""

    error: bool
    output: str = ""
    messages: tuple[str, ...] = field(default_factory=tuple)

    @property
    def message_text(self) -> str:
        return "".join(f"{message}\n" for message in self.messages)


@runtime_checkable
class ValidationService(Protocol):
    def check_well_formed(self, path: Path) -> ServiceOutcome: ...

    def validate_dtd(self, path: Path) -> ServiceOutcome: ...

    def validate_schema(self, path: Path) -> ServiceOutcome: ...


@runtime_checkable
class TransformationService(Protocol):
    def transform(
        self,
        path: Path,
        stylesheet: str,
        parameters: Mapping[str, str] | None = None,
    ) -> TransformOutcome: ...


__all__ = [
    "DiagnosticSeverity",
    "ServiceOutcome",
    "TransformOutcome",
    "TransformationService",
    "ValidationService",
    "render_diagnostic",
]
