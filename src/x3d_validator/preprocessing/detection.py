"""HTML wrapper and embedding-technology marker detection, plus scene fragment location."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

NO_CLOSING_ELEMENT_NOTICE: Final[str] = "No closing element </X3D> found"
NO_SCENE_ELEMENT_NOTICE: Final[str] = "No embedded <X3D> element found"

_SCENE_START: Final[re.Pattern[str]] = re.compile(r"<x3d[\s>]", re.IGNORECASE)
_SCENE_END: Final[re.Pattern[str]] = re.compile(r"</x3d>", re.IGNORECASE)


class EmbeddingTechnology(StrEnum):
    X3DOM = "X3DOM"
    X_ITE = "X_ITE"
    COBWEB = "Cobweb"


@dataclass(frozen=True, slots=True)
class EmbeddingDetection:
    """Marker flags discovered once per run and used to gate later stages."""

    html: bool = False
    x3dom: bool = False
    x_ite: bool = False
    cobweb: bool = False

    @property
    def any(self) -> bool:
        return self.html or self.x3dom or self.x_ite or self.cobweb

    @property
    def technologies(self) -> tuple[EmbeddingTechnology, ...]:
        found: list[EmbeddingTechnology] = []
        if self.x3dom:
            found.append(EmbeddingTechnology.X3DOM)
        if self.x_ite:
            found.append(EmbeddingTechnology.X_ITE)
        if self.cobweb:
            found.append(EmbeddingTechnology.COBWEB)
        return tuple(found)

    @property
    def primary(self) -> EmbeddingTechnology | None:
        found = self.technologies
        return found[0] if found else None

    @property
    def skip_external_checks(self) -> bool:
        """X_ITE pages reference their scene separately; parser and transform stages are omitted."""

        return self.x_ite

    def summary(self) -> str:
        return (
            f"foundHTML={_flag(self.html)}, foundX3DOM={_flag(self.x3dom)}, "
            f"foundX_ITE={_flag(self.x_ite)}, foundCobweb={_flag(self.cobweb)}"
        )


def is_html_wrapped(text: str) -> bool:
    """True when an ``<html`` tag appears before any ``<X3D`` start tag."""

    positions = [index for index in (text.find("<html"), text.find("<HTML")) if index >= 0]
    if not positions:
        return False
    x3d_index = text.find("<X3D")
    return x3d_index < 0 or min(positions) < x3d_index


def detect_embedding(text: str) -> EmbeddingDetection:
    return EmbeddingDetection(
        html=is_html_wrapped(text),
        x3dom="x3dom." in text,
        x_ite="x_ite." in text or "<x3dcanvas " in text.lower(),
        cobweb="cobweb." in text,
    )


def extract_scene_fragment(text: str) -> tuple[str, tuple[str, ...]]:
    """Slice the scene from its ``<X3D`` start tag through the matching ``</X3D>``."""

    start_match = _SCENE_START.search(text)
    if start_match is None:
        return text, (NO_SCENE_ELEMENT_NOTICE,)
    start = start_match.start()
    end_match = _SCENE_END.search(text, start)
    if end_match is None:
        return text[start:], (NO_CLOSING_ELEMENT_NOTICE,)
    return text[start : end_match.end()], ()


def _flag(value: bool) -> str:
    return "true" if value else "false"


__all__ = [
    "NO_CLOSING_ELEMENT_NOTICE",
    "NO_SCENE_ELEMENT_NOTICE",
    "EmbeddingDetection",
    "EmbeddingTechnology",
    "detect_embedding",
    "extract_scene_fragment",
    "is_html_wrapped",
]
