"""Exception taxonomy shared by the validator layers."""

from __future__ import annotations


class X3dValidatorError(Exception):
    """Base error for validator failures."""


class UsageError(X3dValidatorError, ValueError):
    """Raised for invalid or conflicting invocation arguments."""


class InputUnreadableError(X3dValidatorError, OSError):
    """Raised when the source document is missing or cannot be read."""


class OffsetOutOfRangeError(X3dValidatorError, IndexError):
    """Raised when a character offset lies outside the scanned lines."""

    def __init__(self, offset: int, limit: int) -> None:
        self.offset = offset
        self.limit = limit
        super().__init__(f"offset {offset} outside scanned range [0, {limit})")


class CollaboratorError(X3dValidatorError, RuntimeError):
    """Raised when an external validation or transformation service cannot run."""


__all__ = [
    "CollaboratorError",
    "InputUnreadableError",
    "OffsetOutOfRangeError",
    "UsageError",
    "X3dValidatorError",
]
