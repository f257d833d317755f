"""
x3d-validator — character offset to line/column mapping

File: src/x3d_validator/scanning/positions.py
Last updated: 2026-10-19

Purpose
- Build a cumulative per-line offset table once per document and resolve raw
  character offsets into 1-based line numbers and 0-based columns.

Functional requirements
- Entry 0 is a sentinel ``0``; entry ``i`` is the offset just past line ``i``.
- A final line without a terminator still contributes ``len(line) + 1``.
- ``\\r\\n`` counts as one terminator of width two so CRLF files do not drift.
- Lookups use binary search over the monotonic table.

Non-functional requirements
- Out-of-range offsets raise ``OffsetOutOfRangeError``; ``describe`` never raises.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Final

from x3d_validator.domain.errors import OffsetOutOfRangeError

_LINE_BREAK: Final[re.Pattern[str]] = re.compile(r"\r\n|\r|\n")

NOT_FOUND_DESCRIPTION: Final[str] = " (position not found within scanned lines): "


@dataclass(frozen=True, slots=True)
class LineOffsetTable:
    """Cumulative character counts indexed by 1-based line number."""

    offsets: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.offsets or self.offsets[0] != 0:
            raise ValueError("LineOffsetTable.offsets must start with the 0 sentinel")
        for previous, current in zip(self.offsets, self.offsets[1:]):
            if current < previous:
                raise ValueError("LineOffsetTable.offsets must be non-decreasing")

    @classmethod
    def from_text(cls, text: str) -> LineOffsetTable:
        offsets = [0]
        consumed = 0
        for match in _LINE_BREAK.finditer(text):
            consumed = match.end()
            offsets.append(consumed)
        if consumed < len(text):
            offsets.append(len(text) + 1)
        return cls(tuple(offsets))

    @property
    def line_count(self) -> int:
        return len(self.offsets) - 1

    @property
    def limit(self) -> int:
        return self.offsets[-1]

    def __len__(self) -> int:
        return len(self.offsets)

    def __getitem__(self, index: int) -> int:
        return self.offsets[index]

    def locate(self, offset: int) -> tuple[int, int]:
        """Return ``(line, column)`` for ``offset``."""

        if offset < 0 or offset >= self.limit:
            raise OffsetOutOfRangeError(offset, self.limit)
        line = bisect_right(self.offsets, offset)
        return line, offset - self.offsets[line - 1]

    def try_locate(self, offset: int) -> tuple[int, int] | None:
        try:
            return self.locate(offset)
        except OffsetOutOfRangeError:
            return None

    def describe(self, offset: int) -> str:
        located = self.try_locate(offset)
        if located is None:
            return NOT_FOUND_DESCRIPTION
        line, column = located
        return f" in line {line} column {column}: "


__all__ = ["NOT_FOUND_DESCRIPTION", "LineOffsetTable"]
