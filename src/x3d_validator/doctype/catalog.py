"""
x3d-validator — catalog of known X3D DOCTYPE declarations

File: src/x3d_validator/doctype/catalog.py
Last updated: 2026-10-19

Purpose
- Hold the ordered lookup table of ``(variant, pattern, canonical)`` entries used to
  classify and rewrite the DOCTYPE of a scene.

Functional requirements
- Priority order: final 4.1 down to 3.0, then transitional 3.1 down to 3.0.
- Canonical strings omit the closing ``>`` so scenes with an internal subset
  (``[``) are rewritten in place.
- Patterns tolerate whitespace runs between tokens and require ``>`` or ``[``
  after optional whitespace.
- Declarations directly inside an XML comment opener are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from x3d_validator.constants import (
    FINAL_VERSIONS,
    HTTP_TOLERANT_VERSIONS,
    TRANSITIONAL_VERSIONS,
)
from x3d_validator.domain.models import DeclarationFamily, DeclarationVariant

_COMMENT_GUARD: Final[str] = r"(?<!<!--)(?<!<!--\s)"
_DECLARATION_END: Final[str] = r"(?=\s*[>\[])"

ANY_DECLARATION_PATTERN: Final[re.Pattern[str]] = re.compile(
    _COMMENT_GUARD + r"<!DOCTYPE X3D PUBLIC"
)

WARNING_COMMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"<!--\s*Warning:  transitional DOCTYPE in source \.x3d file\s*-->(?:\r\n|\r|\n)?"
)

_FRAGMENT_VERSION_3: Final[re.Pattern[str]] = re.compile(r"version=[\"']3\.")


def final_declaration(version: str) -> str:
    return (
        f'<!DOCTYPE X3D PUBLIC "ISO//Web3D//DTD X3D {version}//EN" '
        f'"https://www.web3d.org/specifications/x3d-{version}.dtd"'
    )


def transitional_declaration(version: str) -> str:
    return (
        f'<!DOCTYPE X3D PUBLIC "https://www.web3d.org/specifications/x3d-{version}.dtd" '
        f'"file:///www.web3d.org/TaskGroups/x3d/translation/x3d-{version}.dtd"'
    )


@dataclass(frozen=True, slots=True)
class DeclarationEntry:
    """One recognizable declaration and its canonical spelling."""

    variant: DeclarationVariant
    pattern: re.Pattern[str]
    canonical: str

    def search(self, text: str) -> re.Match[str] | None:
        return self.pattern.search(text)


def _final_entry(version: str) -> DeclarationEntry:
    escaped = re.escape(version)
    scheme = r"https?" if version in HTTP_TOLERANT_VERSIONS else r"https"
    pattern = re.compile(
        _COMMENT_GUARD
        + r"<!DOCTYPE X3D PUBLIC\s+"
        + rf'"ISO//Web3D//DTD X3D {escaped}//EN"\s+'
        + rf'"{scheme}://www\.web3d\.org/specifications/x3d-{escaped}\.dtd"'
        + _DECLARATION_END
    )
    return DeclarationEntry(DeclarationVariant.final(version), pattern, final_declaration(version))


def _transitional_entry(version: str) -> DeclarationEntry:
    escaped = re.escape(version)
    pattern = re.compile(
        _COMMENT_GUARD
        + r"<!DOCTYPE X3D PUBLIC\s+"
        + rf'"https://www\.web3d\.org/specifications/x3d-{escaped}\.dtd"\s+'
        + rf'"file:///www\.web3d\.org/TaskGroups/x3d/translation/x3d-{escaped}\.dtd"'
        + _DECLARATION_END
    )
    return DeclarationEntry(
        DeclarationVariant.transitional(version), pattern, transitional_declaration(version)
    )


CATALOG: Final[tuple[DeclarationEntry, ...]] = (
    *(_final_entry(version) for version in FINAL_VERSIONS),
    *(_transitional_entry(version) for version in TRANSITIONAL_VERSIONS),
)


def first_match(text: str) -> tuple[DeclarationEntry, re.Match[str]] | None:
    """Return the highest-priority catalog entry found in ``text``."""

    for entry in CATALOG:
        match = entry.search(text)
        if match is not None:
            return entry, match
    return None


def count_declarations(text: str) -> int:
    return sum(1 for _ in ANY_DECLARATION_PATTERN.finditer(text))


def entry_for(family: DeclarationFamily, version: str | None) -> DeclarationEntry | None:
    for entry in CATALOG:
        if entry.variant.family is family and entry.variant.version == version:
            return entry
    return None


def default_final_version(fragment: str) -> str:
    """Version of the DOCTYPE synthesized for an extracted scene fragment."""

    return "3.3" if _FRAGMENT_VERSION_3.search(fragment) else "4.0"


__all__ = [
    "ANY_DECLARATION_PATTERN",
    "CATALOG",
    "WARNING_COMMENT_PATTERN",
    "DeclarationEntry",
    "count_declarations",
    "default_final_version",
    "entry_for",
    "final_declaration",
    "first_match",
    "transitional_declaration",
]
