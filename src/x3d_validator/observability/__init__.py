"""Logging setup for the validator."""

from x3d_validator.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    default_log_redactor,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "default_log_redactor",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
