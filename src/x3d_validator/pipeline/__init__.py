"""Validation pipeline: stage catalog, orchestrator and report assembly."""

from x3d_validator.pipeline.engine import ValidationPipeline, create_pipeline
from x3d_validator.pipeline.report import ReportBuilder, ValidationReport, render_html
from x3d_validator.pipeline.stages import (
    DEFAULT_STAGE_IDS_IN_ORDER,
    STAGES,
    PipelineContext,
    StageDefinition,
    StageOutput,
)

__all__ = [
    "DEFAULT_STAGE_IDS_IN_ORDER",
    "STAGES",
    "PipelineContext",
    "ReportBuilder",
    "StageDefinition",
    "StageOutput",
    "ValidationPipeline",
    "ValidationReport",
    "create_pipeline",
    "render_html",
]
