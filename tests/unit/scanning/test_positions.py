"""
x3d-validator — unit tests for line/column offset resolution

File: tests/unit/scanning/test_positions.py
Last updated: 2026-10-19

Purpose
- Validate ``LineOffsetTable`` construction and offset lookup.

What this test file should cover
- LF, CRLF and lone CR line breaks.
- Unterminated last line sentinel.
- Out-of-range offsets and their rendered descriptions.
- Property: every character of joined lines resolves to its own line and column.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from x3d_validator.domain.errors import OffsetOutOfRangeError
from x3d_validator.scanning.positions import NOT_FOUND_DESCRIPTION, LineOffsetTable


def test_offsets_for_unterminated_last_line() -> None:
    table = LineOffsetTable.from_text("ab\ncd")

    assert table.offsets == (0, 3, 6)
    assert table.line_count == 2
    assert table.locate(0) == (1, 0)
    assert table.locate(2) == (1, 2)
    assert table.locate(3) == (2, 0)
    assert table.locate(5) == (2, 2)


def test_terminated_text_has_no_extra_sentinel() -> None:
    table = LineOffsetTable.from_text("ab\ncd\n")

    assert table.offsets == (0, 3, 6)
    assert table.limit == 6


def test_crlf_counts_as_single_break() -> None:
    table = LineOffsetTable.from_text("a\r\nb\rc")

    assert table.offsets == (0, 3, 5, 7)
    assert table.locate(3) == (2, 0)
    assert table.locate(5) == (3, 0)


def test_empty_text_has_only_sentinel() -> None:
    table = LineOffsetTable.from_text("")

    assert table.offsets == (0,)
    assert table.line_count == 0
    assert table.try_locate(0) is None


@pytest.mark.parametrize("offset", [-1, 6, 100])
def test_locate_rejects_out_of_range_offsets(offset: int) -> None:
    table = LineOffsetTable.from_text("ab\ncd")

    with pytest.raises(OffsetOutOfRangeError):
        table.locate(offset)


def test_describe_renders_position_or_not_found() -> None:
    table = LineOffsetTable.from_text("ab\ncd")

    assert table.describe(4) == " in line 2 column 1: "
    assert table.describe(42) == NOT_FOUND_DESCRIPTION


def test_offsets_must_start_with_zero_sentinel() -> None:
    with pytest.raises(ValueError, match="0 sentinel"):
        LineOffsetTable((1, 2))


def test_offsets_must_not_decrease() -> None:
    with pytest.raises(ValueError, match="non-decreasing"):
        LineOffsetTable((0, 5, 3))


_LINE_TEXT = st.text(
    alphabet=st.characters(exclude_characters="\r\n", exclude_categories=("Cs",)),
    max_size=12,
)


@given(lines=st.lists(_LINE_TEXT, min_size=1, max_size=8), data=st.data())
def test_every_character_resolves_to_its_line_and_column(
    lines: list[str], data: st.DataObject
) -> None:
    text = "\n".join(lines)
    table = LineOffsetTable.from_text(text)

    start = 0
    for index, line in enumerate(lines):
        if line:
            column = data.draw(st.integers(min_value=0, max_value=len(line) - 1))
            assert table.locate(start + column) == (index + 1, column)
        start += len(line) + 1


@given(text=st.text(max_size=40))
def test_offsets_are_non_decreasing_for_any_text(text: str) -> None:
    table = LineOffsetTable.from_text(text)

    assert table.offsets[0] == 0
    assert list(table.offsets) == sorted(table.offsets)
