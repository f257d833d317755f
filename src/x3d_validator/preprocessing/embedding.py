"""
x3d-validator — scene preprocessing before validation

File: src/x3d_validator/preprocessing/embedding.py
Last updated: 2026-10-19

Purpose
- Detect HTML wrapping and embedding technology markers, extract the embedded
  scene fragment and normalize specification references to https.

Functional requirements
- Extraction runs from the first ``<X3D`` start tag (never ``<X3DCanvas``) through
  the first following ``</X3D>``, or to end of input with an explicit notice.
- Extracted fragments get a synthesized XML prolog and final DOCTYPE; 3.x
  fragments get the 3.3 DOCTYPE and everything else gets 4.0.
- Every ``http://`` specification reference is rewritten to ``https://`` and
  each substitution is noted.
- The source document is never mutated; the working copy is a derived Document.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from x3d_validator.constants import (
    INSECURE_SPECIFICATION_PREFIX,
    SECURE_SPECIFICATION_PREFIX,
    XML_DECLARATION,
)
from x3d_validator.doctype.catalog import default_final_version, final_declaration
from x3d_validator.preprocessing.detection import (
    NO_CLOSING_ELEMENT_NOTICE,
    NO_SCENE_ELEMENT_NOTICE,
    EmbeddingDetection,
    detect_embedding,
    extract_scene_fragment,
)
from x3d_validator.utils.fs import scoped_temp_file

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from x3d_validator.domain.models import Document

_CANVAS_START: Final[str] = "<X3DCanvas "
_INSECURE_REFERENCE: Final[re.Pattern[str]] = re.compile(
    re.escape(INSECURE_SPECIFICATION_PREFIX) + r"[^\s\"'<>]*"
)


@dataclass(frozen=True, slots=True)
class PreprocessResult:
    """Working document plus everything discovered while producing it."""

    original: Document
    working: Document
    detection: EmbeddingDetection
    notes: tuple[str, ...]


def preprocess(document: Document) -> PreprocessResult:
    text = document.text
    detection = detect_embedding(text)
    notes: list[str] = []

    if detection.any:
        notes.append(detection.summary())

    if detection.x_ite and _CANVAS_START in text:
        notes.append(f"Referenced model {_canvas_tag(text)} can be checked separately")

    scene_text, substitution_notes = secure_specification_references(text)
    notes.extend(substitution_notes)

    if detection.html:
        fragment, fragment_notes = extract_scene_fragment(scene_text)
        notes.extend(fragment_notes)
        scene_text = synthesize_prolog(fragment)

    working = document.derive(scene_text)
    notes.append(f"Total file length: {document.byte_length} bytes")
    notes.append(f"X3D file length: {working.byte_length} bytes")
    return PreprocessResult(
        original=document,
        working=working,
        detection=detection,
        notes=tuple(notes),
    )


def secure_specification_references(text: str) -> tuple[str, tuple[str, ...]]:
    """Rewrite insecure specification-host references, noting each one."""

    notes: list[str] = []
    for match in _INSECURE_REFERENCE.finditer(text):
        reference = match.group(0)
        notes.append(
            f"substituting https to avoid redirection when {_purpose(reference)} {reference}"
        )
    if not notes:
        return text, ()
    return text.replace(INSECURE_SPECIFICATION_PREFIX, SECURE_SPECIFICATION_PREFIX), tuple(notes)


def synthesize_prolog(fragment: str) -> str:
    declaration = final_declaration(default_final_version(fragment))
    return f"{XML_DECLARATION}\n{declaration}>\n{fragment}"


@contextmanager
def working_copy(document: Document) -> Iterator[Path]:
    """Materialize ``document`` as a temporary file removed when the scope exits."""

    stem = document.path.stem or "scene"
    with scoped_temp_file(document.text, prefix=f"{stem}Excerpt-", suffix=".x3d") as path:
        yield path


def _canvas_tag(text: str) -> str:
    start = text.find(_CANVAS_START)
    end = text.find(">", start)
    return text[start:] if end < 0 else text[start : end + 1]


def _purpose(reference: str) -> str:
    if reference.endswith(".dtd"):
        return "checking XML DOCTYPE at"
    if reference.endswith(".xsd"):
        return "checking XML Schema url at"
    return "retrieving"


__all__ = [
    "NO_CLOSING_ELEMENT_NOTICE",
    "NO_SCENE_ELEMENT_NOTICE",
    "PreprocessResult",
    "extract_scene_fragment",
    "preprocess",
    "secure_specification_references",
    "synthesize_prolog",
    "working_copy",
]
