"""
x3d-validator — unit tests for the DOCTYPE declaration catalog

File: tests/unit/doctype/test_catalog.py
Last updated: 2026-10-19

Purpose
- Validate catalog ordering, pattern tolerance and the comment guard.
"""

from __future__ import annotations

import pytest

from x3d_validator.constants import FINAL_VERSIONS, TRANSITIONAL_VERSIONS
from x3d_validator.doctype.catalog import (
    CATALOG,
    count_declarations,
    default_final_version,
    entry_for,
    final_declaration,
    first_match,
    transitional_declaration,
)
from x3d_validator.domain.models import DeclarationFamily, DeclarationVariant


def test_catalog_order_is_final_then_transitional_newest_first() -> None:
    labels = [entry.variant for entry in CATALOG]

    assert labels == [
        *(DeclarationVariant.final(version) for version in FINAL_VERSIONS),
        *(DeclarationVariant.transitional(version) for version in TRANSITIONAL_VERSIONS),
    ]
    assert FINAL_VERSIONS[0] == "4.1"


def test_canonical_strings_omit_closing_bracket() -> None:
    for entry in CATALOG:
        assert entry.canonical.startswith("<!DOCTYPE X3D PUBLIC ")
        assert not entry.canonical.endswith(">")


@pytest.mark.parametrize("version", FINAL_VERSIONS)
def test_each_final_declaration_is_recognized(version: str) -> None:
    found = first_match(final_declaration(version) + ">")

    assert found is not None
    assert found[0].variant == DeclarationVariant.final(version)


@pytest.mark.parametrize("version", TRANSITIONAL_VERSIONS)
def test_each_transitional_declaration_is_recognized(version: str) -> None:
    found = first_match(transitional_declaration(version) + ">")

    assert found is not None
    assert found[0].variant == DeclarationVariant.transitional(version)


def test_plain_http_tolerated_for_older_final_versions() -> None:
    legacy = final_declaration("3.3").replace("https://", "http://") + ">"

    found = first_match(legacy)

    assert found is not None
    assert found[0].variant == DeclarationVariant.final("3.3")


def test_plain_http_not_tolerated_for_latest_final_version() -> None:
    legacy = final_declaration("4.1").replace("https://", "http://") + ">"

    assert first_match(legacy) is None
    assert count_declarations(legacy) == 1


def test_whitespace_runs_and_internal_subset_are_accepted() -> None:
    text = (
        '<!DOCTYPE X3D PUBLIC\n    "ISO//Web3D//DTD X3D 4.0//EN"\n'
        '    "https://www.web3d.org/specifications/x3d-4.0.dtd" [\n]>'
    )

    found = first_match(text)

    assert found is not None
    assert found[0].variant == DeclarationVariant.final("4.0")


def test_commented_declaration_is_ignored() -> None:
    text = "<!--" + final_declaration("4.0") + ">-->\n<!-- " + final_declaration("3.3") + ">-->"

    assert first_match(text) is None
    assert count_declarations(text) == 0


def test_declaration_must_be_followed_by_closing_or_subset() -> None:
    assert first_match(final_declaration("4.0") + ' "extra">') is None


def test_entry_for_has_no_transitional_form_of_newer_versions() -> None:
    assert entry_for(DeclarationFamily.TRANSITIONAL, "3.3") is None
    entry = entry_for(DeclarationFamily.FINAL, "3.0")
    assert entry is not None
    assert entry.canonical == final_declaration("3.0")


@pytest.mark.parametrize(
    ("fragment", "expected"),
    [
        ('<X3D profile="Immersive" version="3.2">', "3.3"),
        ("<X3D version='3.0'>", "3.3"),
        ('<X3D version="4.0">', "4.0"),
        ("<X3D>", "4.0"),
    ],
)
def test_default_final_version_for_fragments(fragment: str, expected: str) -> None:
    assert default_final_version(fragment) == expected
