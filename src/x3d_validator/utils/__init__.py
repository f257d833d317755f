"""Filesystem helpers shared across the validator."""

from x3d_validator.utils.fs import atomic_write, scoped_temp_file

__all__ = ["atomic_write", "scoped_temp_file"]
