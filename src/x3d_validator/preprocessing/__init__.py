"""
x3d-validator — preprocessing package public API.

File: src/x3d_validator/preprocessing/__init__.py
Last updated: 2026-10-19

Purpose
- Export HTML/embedding detection, fragment extraction and reference checks.

Import order matters: ``detection`` has no package dependencies and is loaded
before ``embedding``, which pulls in the DOCTYPE catalog.
"""

from x3d_validator.preprocessing.detection import (
    EmbeddingDetection,
    EmbeddingTechnology,
    detect_embedding,
    is_html_wrapped,
)
from x3d_validator.preprocessing.embedding import (
    NO_CLOSING_ELEMENT_NOTICE,
    PreprocessResult,
    preprocess,
    working_copy,
)
from x3d_validator.preprocessing.references import ReferencesCheck, check_embedding_references

__all__ = [
    "NO_CLOSING_ELEMENT_NOTICE",
    "EmbeddingDetection",
    "EmbeddingTechnology",
    "PreprocessResult",
    "ReferencesCheck",
    "check_embedding_references",
    "detect_embedding",
    "is_html_wrapped",
    "preprocess",
    "working_copy",
]
