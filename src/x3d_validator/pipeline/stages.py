"""
x3d-validator — pipeline stage catalog

File: src/x3d_validator/pipeline/stages.py
Last updated: 2026-10-19

Purpose
- Declares the fixed, ordered list of validation stages and the functions that
  run them against a prepared ``PipelineContext``.

Functional requirements
- Stage order is fixed; the engine numbers only the stages that run.
- Stages flagged ``skip_for_x_ite`` do not run when an X_ITE page was detected.
- Stage functions return their report text and error flag; they never write to
  the report directly and may raise, leaving fault capture to the engine.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from x3d_validator.collaborators.base import TransformationService, ValidationService
from x3d_validator.constants import (
    REFERENCE_URL_CLASSIC_VRML,
    REFERENCE_URL_DOCTYPE,
    REFERENCE_URL_DTD_SCHEMA,
    REFERENCE_URL_PRETTY_PRINT,
    REFERENCE_URL_REGEX,
    REFERENCE_URL_SCHEMATRON,
    REFERENCE_URL_TIDY,
    REFERENCE_URL_WELL_FORMED,
    STYLESHEET_CLASSIC_VRML,
    STYLESHEET_PRETTY_PRINT,
    STYLESHEET_SCHEMATRON,
    STYLESHEET_SVRL_TEXT,
    STYLESHEET_TIDY,
)
from x3d_validator.doctype.checker import DoctypeChecker
from x3d_validator.domain.models import Document
from x3d_validator.preprocessing.detection import EmbeddingDetection
from x3d_validator.preprocessing.references import ReferencesCheck
from x3d_validator.scanning.detectors import ValuesRegexChecker
from x3d_validator.utils.fs import scoped_temp_file

STAGE_WELL_FORMED: Final[str] = "well_formed"
STAGE_DOCTYPE: Final[str] = "doctype"
STAGE_EMBEDDING_REFERENCES: Final[str] = "embedding_references"
STAGE_DTD_VALIDATION: Final[str] = "dtd_validation"
STAGE_SCHEMA_VALIDATION: Final[str] = "schema_validation"
STAGE_CLASSIC_VRML: Final[str] = "classic_vrml_conversion"
STAGE_REGEX_VALUES: Final[str] = "regex_values"
STAGE_SCHEMATRON: Final[str] = "schematron"
STAGE_TIDY: Final[str] = "tidy"
STAGE_PRETTY_PRINT: Final[str] = "pretty_print"

X3DOM_ATTRIBUTES_NOTE: Final[str] = (
    "*** Note that X3DOM allows X3D element to include attributes id, showLog, "
    "showProgress, showStats"
)
SCHEMATRON_GOOD_PRACTICE_NOTE: Final[str] = (
    "Good practice is to fix errors and warnings wherever possible, and consider silencing "
    "harmless informational messages, so that important indicators remain noticeable."
)
PRETTY_PRINT_COMPLETE_NOTE: Final[str] = "Conversion complete, documentation appears below."

_X3DOM_ATTRIBUTE_MARKERS: Final[tuple[str, ...]] = (
    "showLog=",
    "showProgress=",
    "showStat=",
    "<X3D id='",
)
_BODY_EXCERPT: Final[re.Pattern[str]] = re.compile(
    r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL
)


@dataclass(slots=True)
class PipelineContext:
    """Per-run state shared by stage functions."""

    original: Document
    working: Document
    working_path: Path
    detection: EmbeddingDetection
    validation: ValidationService
    transforms: TransformationService
    resources: ExitStack
    references: ReferencesCheck | None = None
    verbose: bool = False
    pretty_print_tidy_output: bool = False
    logger: Any | None = None
    tidy_output: str | None = field(default=None)

    def scratch_file(self, text: str, *, suffix: str = ".xml") -> Path:
        """Temporary file that lives until the run's resource scope closes."""

        stem = self.original.path.stem or "scene"
        return self.resources.enter_context(
            scoped_temp_file(text, prefix=f"{stem}-", suffix=suffix)
        )


@dataclass(frozen=True, slots=True)
class StageOutput:
    text: str = ""
    error: bool = False
    notes: tuple[str, ...] = ()


StageRunner = Callable[[PipelineContext], StageOutput]
StageNamer = Callable[[PipelineContext], str]
StageGate = Callable[[PipelineContext], bool]


@dataclass(frozen=True, slots=True)
class StageDefinition:
    """One entry of the fixed stage order."""

    stage_id: str
    name: str
    reference_url: str
    run: StageRunner
    skip_for_x_ite: bool = True
    applies: StageGate | None = None
    namer: StageNamer | None = None

    def title(self, context: PipelineContext) -> str:
        return self.namer(context) if self.namer is not None else self.name

    def reference_for(self, context: PipelineContext) -> str:
        if self.stage_id == STAGE_EMBEDDING_REFERENCES and context.references is not None:
            return context.references.reference_url
        return self.reference_url

    def skip_reason(self, context: PipelineContext) -> str | None:
        if self.skip_for_x_ite and context.detection.skip_external_checks:
            return "x_ite_page"
        if self.applies is not None and not self.applies(context):
            return "not_applicable"
        return None


# ---------------------------------------------------------------------------
# Stage functions
# ---------------------------------------------------------------------------


def run_well_formed(context: PipelineContext) -> StageOutput:
    outcome = context.validation.check_well_formed(context.working_path)
    return StageOutput(text=outcome.text, error=outcome.error)


def run_doctype(context: PipelineContext) -> StageOutput:
    checker = DoctypeChecker(verbose=context.verbose, logger=context.logger)
    detection = context.detection
    outcome = checker.process(context.original, html_wrapped=detection.html)
    lines = [
        outcome.log,
        "found HTML page wrapping X3D model using X3DOM: "
        f"{_flag(detection.html and detection.x3dom)}",
        "found HTML page referencing X3D model in X3DCanvas using X_ITE: "
        f"{_flag(detection.html and detection.x_ite)}",
    ]
    return StageOutput(
        text="".join(f"{line}\n" for line in lines if line),
        error=not outcome.passed,
    )


def run_embedding_references(context: PipelineContext) -> StageOutput:
    check = context.references
    if check is None:
        return StageOutput()
    return StageOutput(text=check.render(), error=not check.passed)


def run_dtd_validation(context: PipelineContext) -> StageOutput:
    outcome = context.validation.validate_dtd(context.working_path)
    return StageOutput(text=outcome.text, error=outcome.error, notes=_x3dom_notes(context))


def run_schema_validation(context: PipelineContext) -> StageOutput:
    outcome = context.validation.validate_schema(context.working_path)
    return StageOutput(text=outcome.text, error=outcome.error, notes=_x3dom_notes(context))


def run_classic_vrml(context: PipelineContext) -> StageOutput:
    outcome = context.transforms.transform(context.working_path, STYLESHEET_CLASSIC_VRML)
    return StageOutput(text=outcome.message_text, error=outcome.error)


def run_regex_values(context: PipelineContext) -> StageOutput:
    output = ValuesRegexChecker(context.working).process()
    return StageOutput(text=output, error=bool(output))


def run_schematron(context: PipelineContext) -> StageOutput:
    rules = context.transforms.transform(context.working_path, STYLESHEET_SCHEMATRON)
    if rules.error:
        return StageOutput(text=rules.message_text, error=True)

    svrl_path = context.scratch_file(rules.output, suffix=".svrl.xml")
    report = context.transforms.transform(svrl_path, STYLESHEET_SVRL_TEXT)
    if report.error:
        return StageOutput(text=rules.message_text + report.message_text, error=True)

    result = report.output.strip()
    notes = (SCHEMATRON_GOOD_PRACTICE_NOTE,) if result else ()
    return StageOutput(
        text=f"{result}\n" if result else "",
        error=bool(result) and "error" in result,
        notes=notes,
    )


def run_tidy(context: PipelineContext) -> StageOutput:
    outcome = context.transforms.transform(context.working_path, STYLESHEET_TIDY)
    if not outcome.error and context.pretty_print_tidy_output:
        context.tidy_output = outcome.output
    return StageOutput(text=outcome.message_text, error=outcome.error)


def run_pretty_print(context: PipelineContext) -> StageOutput:
    source = context.working_path
    if context.pretty_print_tidy_output and context.tidy_output:
        source = context.scratch_file(context.tidy_output, suffix=".x3d")
    outcome = context.transforms.transform(
        source,
        STYLESHEET_PRETTY_PRINT,
        {"baseUrlAvailable": "false"},
    )
    if outcome.error:
        return StageOutput(text=outcome.message_text, error=True)
    return StageOutput(
        text=f"{PRETTY_PRINT_COMPLETE_NOTE}\n{extract_body(outcome.output)}",
        error=False,
    )


def extract_body(markup: str) -> str:
    """Return the content between ``<body>`` and ``</body>``, or ``markup`` when absent."""

    match = _BODY_EXCERPT.search(markup)
    if match is None:
        return markup
    excerpt = match.group(1).strip("\n")
    return f"{excerpt}\n" if excerpt else ""


def _x3dom_notes(context: PipelineContext) -> tuple[str, ...]:
    text = context.working.text
    if any(marker in text for marker in _X3DOM_ATTRIBUTE_MARKERS):
        return (X3DOM_ATTRIBUTES_NOTE,)
    return ()


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _embedding_title(context: PipelineContext) -> str:
    if context.references is None:
        return "embedding references check"
    return context.references.name


STAGES: Final[tuple[StageDefinition, ...]] = (
    StageDefinition(
        STAGE_WELL_FORMED, "XML well-formed check", REFERENCE_URL_WELL_FORMED, run_well_formed
    ),
    StageDefinition(
        STAGE_DOCTYPE,
        "DOCTYPE reference check",
        REFERENCE_URL_DOCTYPE,
        run_doctype,
        skip_for_x_ite=False,
    ),
    StageDefinition(
        STAGE_EMBEDDING_REFERENCES,
        "embedding references check",
        "",
        run_embedding_references,
        skip_for_x_ite=False,
        applies=lambda context: context.references is not None,
        namer=_embedding_title,
    ),
    StageDefinition(
        STAGE_DTD_VALIDATION,
        "X3D DTD validation check",
        REFERENCE_URL_DTD_SCHEMA,
        run_dtd_validation,
    ),
    StageDefinition(
        STAGE_SCHEMA_VALIDATION,
        "X3D schema validation check",
        REFERENCE_URL_DTD_SCHEMA,
        run_schema_validation,
    ),
    StageDefinition(
        STAGE_CLASSIC_VRML,
        "X3dToX3dvClassicVrml conversion check",
        REFERENCE_URL_CLASSIC_VRML,
        run_classic_vrml,
    ),
    StageDefinition(
        STAGE_REGEX_VALUES,
        "Regular expression (regex) integer/float data-patterns check",
        REFERENCE_URL_REGEX,
        run_regex_values,
        skip_for_x_ite=False,
    ),
    StageDefinition(
        STAGE_SCHEMATRON, "X3D Schematron check", REFERENCE_URL_SCHEMATRON, run_schematron
    ),
    StageDefinition(STAGE_TIDY, "X3D Tidy check", REFERENCE_URL_TIDY, run_tidy),
    StageDefinition(
        STAGE_PRETTY_PRINT,
        "X3D to XHTML pretty-print listing check",
        REFERENCE_URL_PRETTY_PRINT,
        run_pretty_print,
    ),
)

DEFAULT_STAGE_IDS_IN_ORDER: Final[tuple[str, ...]] = tuple(stage.stage_id for stage in STAGES)


__all__ = [
    "DEFAULT_STAGE_IDS_IN_ORDER",
    "PRETTY_PRINT_COMPLETE_NOTE",
    "SCHEMATRON_GOOD_PRACTICE_NOTE",
    "STAGES",
    "STAGE_CLASSIC_VRML",
    "STAGE_DOCTYPE",
    "STAGE_DTD_VALIDATION",
    "STAGE_EMBEDDING_REFERENCES",
    "STAGE_PRETTY_PRINT",
    "STAGE_REGEX_VALUES",
    "STAGE_SCHEMATRON",
    "STAGE_SCHEMA_VALIDATION",
    "STAGE_TIDY",
    "STAGE_WELL_FORMED",
    "X3DOM_ATTRIBUTES_NOTE",
    "PipelineContext",
    "StageDefinition",
    "StageOutput",
    "extract_body",
]
