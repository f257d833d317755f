"""
x3d-validator — package root

File: src/x3d_validator/__init__.py
Last updated: 2026-10-19

Purpose
- Package root for the X3D scene diagnostic pipeline.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
- Heavy collaborators (lxml, jinja2) are imported by the modules that use them.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
