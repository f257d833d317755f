"""
x3d-validator — validation pipeline orchestrator

File: src/x3d_validator/pipeline/engine.py
Last updated: 2026-10-19

Purpose
- Loads a scene once, preprocesses it, runs every applicable stage in order and
  assembles the report.

Functional requirements
- Only unreadable input aborts a run; any exception raised inside preprocessing
  or a stage is captured at that boundary and the run continues.
- A preprocessing fault falls back to the original document as working copy; a
  working-copy fault falls back to the original file on disk.
- Temporary files are owned by one ``ExitStack`` per run and removed on every
  exit path.

Non-functional requirements
- Single-threaded and synchronous; stage events are logged through structlog.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Final

import structlog

from x3d_validator.collaborators.base import TransformationService, ValidationService
from x3d_validator.collaborators.command import CommandTransformationService
from x3d_validator.collaborators.lxml_services import (
    LxmlTransformationService,
    LxmlValidationService,
)
from x3d_validator.domain.models import CheckResult, CheckStatus, Document, StageFault
from x3d_validator.pipeline.report import ReportBuilder, ValidationReport
from x3d_validator.pipeline.stages import STAGES, PipelineContext, StageDefinition
from x3d_validator.preprocessing.detection import EmbeddingDetection
from x3d_validator.preprocessing.embedding import preprocess, working_copy
from x3d_validator.preprocessing.references import check_embedding_references

PREPROCESSING_STAGE_ID: Final[str] = "preprocessing"
PREPROCESSING_STAGE_NAME: Final[str] = "File preprocessing"
WORKING_COPY_STAGE_ID: Final[str] = "working_copy"
WORKING_COPY_STAGE_NAME: Final[str] = "Working copy preparation"

_NO_EMBEDDING: Final[EmbeddingDetection] = EmbeddingDetection(
    html=False, x3dom=False, x_ite=False, cobweb=False
)


class ValidationPipeline:
    """Runs the fixed stage sequence against one scene document at a time."""

    def __init__(
        self,
        validation_service: ValidationService,
        transformation_service: TransformationService,
        *,
        verbose: bool = False,
        pretty_print_tidy_output: bool = False,
        stages: Sequence[StageDefinition] = STAGES,
        logger: Any | None = None,
    ) -> None:
        self._validation = validation_service
        self._transforms = transformation_service
        self._verbose = verbose
        self._pretty_print_tidy_output = pretty_print_tidy_output
        self._stages = tuple(stages)
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def run(self, path: str | os.PathLike[str]) -> ValidationReport:
        """Validate the scene at ``path``; raises ``InputUnreadableError`` only."""

        return self.run_document(Document.load(path))

    def run_document(self, document: Document) -> ValidationReport:
        builder = ReportBuilder()
        results: list[CheckResult] = []
        builder.header(document.name)
        log = self._logger.bind(document=document.name)

        working = document
        detection = _NO_EMBEDDING
        references = None
        notes: tuple[str, ...] = ()
        try:
            prepared = preprocess(document)
            working, detection, notes = prepared.working, prepared.detection, prepared.notes
            references = check_embedding_references(document.text, detection)
        except Exception as exc:
            results.append(
                _setup_fault(exc, PREPROCESSING_STAGE_ID, PREPROCESSING_STAGE_NAME, builder, log)
            )
        for note in notes:
            builder.append(note)

        with ExitStack() as resources:
            try:
                working_path = resources.enter_context(working_copy(working))
            except Exception as exc:
                results.append(
                    _setup_fault(exc, WORKING_COPY_STAGE_ID, WORKING_COPY_STAGE_NAME, builder, log)
                )
                working, working_path = document, document.path
            context = PipelineContext(
                original=document,
                working=working,
                working_path=working_path,
                detection=detection,
                validation=self._validation,
                transforms=self._transforms,
                resources=resources,
                references=references,
                verbose=self._verbose,
                pretty_print_tidy_output=self._pretty_print_tidy_output,
                logger=log,
            )
            for stage in self._stages:
                results.append(self._run_stage(stage, context, builder, log))

        builder.footer(document.name)
        return ValidationReport(
            document_name=document.name,
            text=builder.text(),
            results=tuple(results),
            notes=notes,
        )

    def _run_stage(
        self,
        stage: StageDefinition,
        context: PipelineContext,
        builder: ReportBuilder,
        log: Any,
    ) -> CheckResult:
        name = stage.title(context)
        reason = stage.skip_reason(context)
        if reason is not None:
            log.info("stage_skipped", stage=stage.stage_id, reason=reason)
            return CheckResult(stage_id=stage.stage_id, name=name, status=CheckStatus.SKIP)

        step = builder.start(name)
        reference_url = stage.reference_for(context) or None
        log.info("stage_started", stage=stage.stage_id, step=step)
        try:
            output = stage.run(context)
        except Exception as exc:
            fault = StageFault.from_exception(exc)
            log.warning("stage_fault", stage=stage.stage_id, step=step, error=fault.render())
            builder.fault(fault, name)
            return CheckResult(
                stage_id=stage.stage_id,
                name=name,
                status=CheckStatus.FAIL,
                step=step,
                reference_url=reference_url,
                fault=fault,
            )

        builder.append(output.text)
        for note in output.notes:
            builder.append(note)
        builder.results(name, output.error)
        status = CheckStatus.FAIL if output.error else CheckStatus.PASS
        log.info("stage_finished", stage=stage.stage_id, step=step, status=status.value)
        return CheckResult(
            stage_id=stage.stage_id,
            name=name,
            status=status,
            report=output.text,
            step=step,
            reference_url=reference_url,
            notes=output.notes,
        )


def _setup_fault(
    exc: Exception, stage_id: str, name: str, builder: ReportBuilder, log: Any
) -> CheckResult:
    """Record a failure outside any numbered stage; the run continues with what is available."""

    fault = StageFault.from_exception(exc)
    log.warning("stage_fault", stage=stage_id, error=fault.render())
    builder.fault(fault, name)
    return CheckResult(stage_id=stage_id, name=name, status=CheckStatus.FAIL, fault=fault)


def create_pipeline(
    config: Mapping[str, Any],
    *,
    verbose: bool | None = None,
    logger: Any | None = None,
) -> ValidationPipeline:
    """Build a pipeline with the services selected by a validated config mapping."""

    validation = config["validation"]
    transforms = config["transforms"]
    report = config["report"]

    allow_network = bool(validation["allow_network"])
    schema_path = Path(validation["schema_path"]) if validation["schema_path"] else None
    stylesheet_dir = Path(transforms["stylesheet_dir"])

    transformation_service: TransformationService
    if transforms["engine"] == "command":
        transformation_service = CommandTransformationService(
            transforms["command"],
            stylesheet_dir,
            timeout_seconds=float(transforms["timeout_seconds"]),
            logger=logger,
        )
    else:
        transformation_service = LxmlTransformationService(
            stylesheet_dir,
            allow_network=allow_network,
            logger=logger,
        )

    return ValidationPipeline(
        LxmlValidationService(
            allow_network=allow_network,
            schema_path=schema_path,
            logger=logger,
        ),
        transformation_service,
        verbose=bool(report["verbose"]) if verbose is None else verbose,
        pretty_print_tidy_output=bool(transforms["pretty_print_tidy_output"]),
        logger=logger,
    )


__all__ = [
    "PREPROCESSING_STAGE_ID",
    "PREPROCESSING_STAGE_NAME",
    "WORKING_COPY_STAGE_ID",
    "WORKING_COPY_STAGE_NAME",
    "ValidationPipeline",
    "create_pipeline",
]
