"""Frozen dataclass models exchanged between the validator layers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from typing import Final, NoReturn

from x3d_validator.domain.errors import InputUnreadableError

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

SOURCE_ENCODING: Final[str] = "utf-8"


class CheckStatus(StrEnum):
    """Outcome of one pipeline stage."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


class DeclarationFamily(StrEnum):
    FINAL = "final"
    TRANSITIONAL = "transitional"
    NONE = "none"
    UNRECOGNIZED = "unrecognized"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True, slots=True)
class Document:
    """Immutable snapshot of a scene document loaded once per run."""

    path: Path
    text: str
    byte_length: int
    read_only: bool = False
    raw: bytes | None = field(default=None, repr=False, compare=False)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> Document:
        source = Path(path)
        try:
            raw = source.read_bytes()
        except FileNotFoundError as exc:
            raise InputUnreadableError(f"input file not found: {source}") from exc
        except IsADirectoryError as exc:
            raise InputUnreadableError(f"input path is a directory: {source}") from exc
        except OSError as exc:
            raise InputUnreadableError(f"unable to read input file {source}: {exc}") from exc
        return cls(
            path=source,
            text=raw.decode(SOURCE_ENCODING, errors="replace"),
            byte_length=len(raw),
            read_only=not os.access(source, os.W_OK),
            raw=raw,
        )

    @classmethod
    def from_text(cls, text: str, *, path: str | os.PathLike[str] = "<memory>") -> Document:
        return cls(path=Path(path), text=text, byte_length=len(text.encode(SOURCE_ENCODING)))

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def source_text(self) -> str:
        """Text decoded with ``surrogateescape`` so every original byte can be re-encoded."""

        if self.raw is None:
            return self.text
        return self.raw.decode(SOURCE_ENCODING, errors="surrogateescape")

    def derive(self, text: str) -> Document:
        """Return a working copy carrying ``text``; the original is left untouched."""

        return replace(
            self, text=text, byte_length=len(text.encode(SOURCE_ENCODING)), raw=None
        )


@dataclass(frozen=True, slots=True)
class DeclarationVariant:
    """Tagged classification of the document's DOCTYPE declaration."""

    family: DeclarationFamily
    version: str | None = None
    count: int = 1

    def __post_init__(self) -> None:
        versioned = self.family in {DeclarationFamily.FINAL, DeclarationFamily.TRANSITIONAL}
        if versioned and not self.version:
            _fail("DeclarationVariant.version", f"required for {self.family.value} variants")
        if not versioned and self.version is not None:
            _fail("DeclarationVariant.version", f"not allowed for {self.family.value} variants")
        if self.family is DeclarationFamily.AMBIGUOUS and self.count < 2:
            _fail("DeclarationVariant.count", "ambiguous variants need at least two matches")

    @classmethod
    def final(cls, version: str) -> DeclarationVariant:
        return cls(DeclarationFamily.FINAL, version)

    @classmethod
    def transitional(cls, version: str) -> DeclarationVariant:
        return cls(DeclarationFamily.TRANSITIONAL, version)

    @classmethod
    def none(cls) -> DeclarationVariant:
        return cls(DeclarationFamily.NONE)

    @classmethod
    def unrecognized(cls) -> DeclarationVariant:
        return cls(DeclarationFamily.UNRECOGNIZED)

    @classmethod
    def ambiguous(cls, count: int) -> DeclarationVariant:
        return cls(DeclarationFamily.AMBIGUOUS, count=count)

    @property
    def is_single_match(self) -> bool:
        return self.family in {DeclarationFamily.FINAL, DeclarationFamily.TRANSITIONAL}

    def label(self) -> str:
        if self.is_single_match:
            return f"{self.family.value} X3D {self.version}"
        if self.family is DeclarationFamily.AMBIGUOUS:
            return f"ambiguous ({self.count} declarations)"
        return self.family.value


@dataclass(frozen=True, slots=True)
class Finding:
    """One anomaly detected in the document text."""

    start: int
    end: int
    text: str
    line: int | None = None
    column: int | None = None

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            _fail("Finding", f"invalid span [{self.start}, {self.end})")

    @property
    def located(self) -> bool:
        return self.line is not None and self.column is not None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "line": self.line,
            "column": self.column,
        }


@dataclass(frozen=True, slots=True)
class StageFault:
    """Exception captured at a stage boundary."""

    exception_type: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> StageFault:
        return cls(exception_type=type(exc).__name__, message=str(exc))

    def render(self) -> str:
        return f"{self.exception_type}: {self.message}"


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result envelope recorded once per executed pipeline stage."""

    stage_id: str
    name: str
    status: CheckStatus
    report: str = ""
    step: int | None = None
    reference_url: str | None = None
    fault: StageFault | None = None
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASS

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "stage_id": self.stage_id,
            "name": self.name,
            "status": self.status.value,
            "step": self.step,
            "report": self.report,
            "reference_url": self.reference_url,
            "fault": None if self.fault is None else self.fault.render(),
            "notes": list(self.notes),
        }


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


__all__ = [
    "SOURCE_ENCODING",
    "CheckResult",
    "CheckStatus",
    "DeclarationFamily",
    "DeclarationVariant",
    "Document",
    "Finding",
    "JSONValue",
    "StageFault",
]
