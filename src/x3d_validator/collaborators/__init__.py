"""External validation and transformation services."""

from x3d_validator.collaborators.base import (
    DiagnosticSeverity,
    ServiceOutcome,
    TransformationService,
    TransformOutcome,
    ValidationService,
    render_diagnostic,
)
from x3d_validator.collaborators.command import (
    CommandResult,
    CommandTransformationService,
    expand_argv,
    run_command,
)
from x3d_validator.collaborators.lxml_services import (
    LxmlTransformationService,
    LxmlValidationService,
)

__all__ = [
    "CommandResult",
    "CommandTransformationService",
    "DiagnosticSeverity",
    "LxmlTransformationService",
    "LxmlValidationService",
    "ServiceOutcome",
    "TransformOutcome",
    "TransformationService",
    "ValidationService",
    "expand_argv",
    "render_diagnostic",
    "run_command",
]
