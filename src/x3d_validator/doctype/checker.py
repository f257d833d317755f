"""
x3d-validator — XML prolog and DOCTYPE checker with family conversion

File: src/x3d_validator/doctype/checker.py
Last updated: 2026-10-19

Purpose
- Check the XML declaration, classify the X3D DOCTYPE against the catalog and
  optionally convert between the transitional and final declaration families.

Functional requirements
- Both conversion requests together is a usage error.
- HTML-wrapped scenes skip classification; the default DOCTYPE synthesized for
  the extracted fragment is reported instead.
- More than one declaration is reported as ambiguous and never rewritten.
- Read-only or HTML-wrapped inputs are never rewritten; the no-op is logged.
- Conversion to transitional inserts the warning comment before the declaration;
  conversion to final removes it. Both are keyed on presence, so repeated
  conversion is a no-op and a transitional -> final -> transitional round trip
  restores the original bytes.

Non-functional requirements
- ``process`` never touches the filesystem; ``process_path`` writes atomically.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Final

import structlog

from x3d_validator.constants import ERROR_TOKEN, WARNING_COMMENT, WARNING_TOKEN
from x3d_validator.doctype.catalog import (
    WARNING_COMMENT_PATTERN,
    count_declarations,
    default_final_version,
    entry_for,
    first_match,
)
from x3d_validator.domain.errors import UsageError
from x3d_validator.domain.models import (
    SOURCE_ENCODING,
    DeclarationFamily,
    DeclarationVariant,
    Document,
)
from x3d_validator.preprocessing.detection import extract_scene_fragment, is_html_wrapped
from x3d_validator.utils.fs import atomic_write

if TYPE_CHECKING:
    import os

_XML_DECLARATION_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"<\?xml version=(\"|')1\.(0|1)(\"|') encoding=(\"|')UTF-(8|16)(\"|')\?>"
)
_XML_DECLARATION_ANY_CASE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"<\?xml version=(\"|')1\.(0|1)(\"|') encoding=(\"|')[Uu][Tt][Ff]-(8|16)(\"|')\?>"
)


class DoctypeUsageError(UsageError):
    """Raised when conflicting conversion requests are supplied."""


@dataclass(frozen=True, slots=True)
class RewriteResult:
    """Outcome of converting one declaration to the requested family."""

    text: str
    changed: bool
    messages: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DoctypeOutcome:
    """Classification, log and optional revised text for one document."""

    variant: DeclarationVariant
    log_lines: tuple[str, ...]
    header_text: str = ""
    html_wrapped: bool = False
    revised_text: str | None = None
    rewritten: bool = False
    written: bool = False

    @property
    def log(self) -> str:
        return "\n".join(self.log_lines)

    @property
    def passed(self) -> bool:
        if self.html_wrapped:
            return True
        return not any(ERROR_TOKEN in line or WARNING_TOKEN in line for line in self.log_lines)


def rewrite_declaration(text: str, target: DeclarationFamily) -> RewriteResult:
    """Convert the single catalog declaration in ``text`` to ``target`` family."""

    if target not in {DeclarationFamily.FINAL, DeclarationFamily.TRANSITIONAL}:
        raise ValueError(f"rewrite target must be final or transitional, got {target.value}")

    found = first_match(text)
    if found is None:
        return RewriteResult(text, False, ("no action taken, no DOCTYPE present to convert.",))

    entry, match = found
    current = entry.variant
    if current.family is target:
        return RewriteResult(text, False, ("no action necessary.",))

    replacement = entry_for(target, current.version)
    if replacement is None:
        return RewriteResult(
            text,
            False,
            (
                f"no {target.value} DOCTYPE exists for {current.family.value} "
                f"X3D {current.version}, no action taken.",
            ),
        )

    before, after = text[: match.start()], text[match.end() :]
    if target is DeclarationFamily.FINAL:
        revised = (
            _strip_warning_comments(before)
            + replacement.canonical
            + _strip_warning_comments(after)
        )
        messages = (
            f"scene reset to final X3D {current.version} DTD.",
            replacement.canonical + ">",
        )
    else:
        revised = (
            _strip_warning_comments(before)
            + WARNING_COMMENT.rstrip("\n")
            + _newline_style(text)
            + replacement.canonical
            + _strip_warning_comments(after)
        )
        messages = ("scene reset to transitional X3D DTD.", replacement.canonical + ">")
    return RewriteResult(revised, revised != text, messages)


class DoctypeChecker:
    """Check prolog and DOCTYPE of a scene, optionally converting its declaration family."""

    def __init__(
        self,
        *,
        set_final: bool = False,
        set_transitional: bool = False,
        verbose: bool = False,
        logger: Any | None = None,
    ) -> None:
        if set_final and set_transitional:
            raise DoctypeUsageError(
                "both --set-final and --set-transitional specified, only one operation allowed"
            )
        self._set_final = set_final
        self._set_transitional = set_transitional
        self._verbose = verbose
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def requested_target(self) -> DeclarationFamily | None:
        if self._set_final:
            return DeclarationFamily.FINAL
        if self._set_transitional:
            return DeclarationFamily.TRANSITIONAL
        return None

    def process(self, document: Document, *, html_wrapped: bool | None = None) -> DoctypeOutcome:
        text = document.text
        target = self.requested_target
        log: list[str] = []

        if not text:
            log.append(f"{ERROR_TOKEN} failure: empty file {document.name}")
            return DoctypeOutcome(variant=DeclarationVariant.none(), log_lines=tuple(log))

        header = _header_text(text, log)
        wrapped = is_html_wrapped(text) if html_wrapped is None else html_wrapped

        def finish(variant: DeclarationVariant) -> DoctypeOutcome:
            return DoctypeOutcome(
                variant=variant,
                log_lines=tuple(log),
                header_text=header,
                html_wrapped=wrapped,
            )

        if not self._check_prolog(text, header, wrapped, log) and target is None:
            return finish(DeclarationVariant.none())

        if wrapped:
            presence = "original" if "<!DOCTYPE" in text else "absence of"
            fragment, _ = extract_scene_fragment(text)
            log.append(
                f"found HTML, ignoring {presence} DOCTYPE, "
                f"using X3D DOCTYPE v{default_final_version(fragment)};"
            )
            if target is not None:
                log.append("found HTML, no DOCTYPE conversion attempted.")
            return finish(DeclarationVariant.none())

        found = first_match(text)
        declaration_count = count_declarations(text)

        def ambiguous() -> DoctypeOutcome:
            log.append(f"{WARNING_TOKEN} Multiple X3D DOCTYPEs found ({declaration_count} total).")
            if target is not None and not document.read_only:
                log.append("No DTD conversion attempted.")
            log.append(header)
            return finish(DeclarationVariant.ambiguous(declaration_count))

        if found is None:
            if declaration_count == 0:
                log.append(f"{ERROR_TOKEN} failure: no X3D DOCTYPE found!")
                log.append(header)
                if target is not None:
                    log.append("no action taken, no DOCTYPE present to convert.")
                return finish(DeclarationVariant.none())
            log.append(f"{ERROR_TOKEN} failure: nonstandard X3D DOCTYPE found!")
            if declaration_count > 1:
                return ambiguous()
            log.append(header)
            return finish(DeclarationVariant.unrecognized())

        variant = found[0].variant
        if variant.family is DeclarationFamily.FINAL:
            log.append(f"success: final X3D {variant.version} DOCTYPE found.")
        else:
            log.append(f"warning: transitional X3D {variant.version} DOCTYPE found.")
        if declaration_count > 1:
            return ambiguous()
        if self._verbose:
            log.append(header)
        if target is None:
            return finish(variant)

        if document.read_only:
            log.append(
                f"{WARNING_TOKEN} {document.name} file is read-only, "
                "no DOCTYPE conversion attempted."
            )
            return finish(variant)

        result = rewrite_declaration(text, target)
        log.extend(result.messages)
        if result.changed:
            self._logger.info(
                "doctype_rewritten",
                path=str(document.path),
                source_variant=variant.label(),
                target_family=target.value,
            )
        return DoctypeOutcome(
            variant=variant,
            log_lines=tuple(log),
            header_text=header,
            html_wrapped=wrapped,
            revised_text=result.text if result.changed else None,
            rewritten=result.changed,
        )

    def process_path(self, path: str | os.PathLike[str]) -> DoctypeOutcome:
        """Load, check and, when a conversion happened, rewrite the file in place."""

        document = Document.load(path)
        outcome = self.process(document)
        target = self.requested_target
        if not outcome.rewritten or target is None:
            return outcome
        # Rewrite the losslessly decoded text so undecodable bytes are written back unchanged.
        result = rewrite_declaration(document.source_text, target)
        atomic_write(document.path, result.text.encode(SOURCE_ENCODING, errors="surrogateescape"))
        return replace(outcome, written=True)

    def _check_prolog(self, text: str, header: str, wrapped: bool, log: list[str]) -> bool:
        declared = _XML_DECLARATION_PATTERN.search(text) is not None
        if wrapped:
            if declared:
                log.append("found HTML, ignoring original XML declaration.")
            else:
                log.append("found HTML, ignoring absence of XML declaration.")
            return True
        if declared:
            log.append("success: valid XML declaration found.")
            return True
        if _XML_DECLARATION_ANY_CASE_PATTERN.search(text) is not None:
            log.append(
                f"{ERROR_TOKEN} failure: invalid XML declaration found "
                "(note that encoding='UTF-8' must include hyphen and be upper case)."
            )
            return True
        log.append(f"{ERROR_TOKEN} failure: no valid XML declaration found in scene!")
        log.append(header)
        return False


def _header_text(text: str, log: list[str]) -> str:
    index = text.find("<X3D")
    if index < 0:
        log.append(f"{ERROR_TOKEN} failure: no <X3D> element found")
        return text.strip()
    return text[:index].strip()


def _strip_warning_comments(text: str) -> str:
    return WARNING_COMMENT_PATTERN.sub("", text)


def _newline_style(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


__all__ = [
    "DoctypeChecker",
    "DoctypeOutcome",
    "DoctypeUsageError",
    "RewriteResult",
    "rewrite_declaration",
]
