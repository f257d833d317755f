"""
x3d-validator — domain types

File: src/x3d_validator/domain/__init__.py
Last updated: 2026-10-19

Purpose
- Domain types shared across layers: Document, DeclarationVariant, Finding, CheckResult.

Functional requirements
- Domain objects are immutable; derived documents are new instances.
- Domain layer stays free of IO beyond ``Document.load``.
"""

from x3d_validator.domain.errors import (
    CollaboratorError,
    InputUnreadableError,
    OffsetOutOfRangeError,
    UsageError,
    X3dValidatorError,
)
from x3d_validator.domain.models import (
    CheckResult,
    CheckStatus,
    DeclarationFamily,
    DeclarationVariant,
    Document,
    Finding,
    StageFault,
)

__all__ = [
    "CheckResult",
    "CheckStatus",
    "CollaboratorError",
    "DeclarationFamily",
    "DeclarationVariant",
    "Document",
    "Finding",
    "InputUnreadableError",
    "OffsetOutOfRangeError",
    "StageFault",
    "UsageError",
    "X3dValidatorError",
]
