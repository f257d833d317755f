"""Script and stylesheet reference checks for HTML pages embedding X3D."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from x3d_validator.constants import (
    REFERENCE_COBWEB,
    REFERENCE_X3DOM,
    REFERENCE_X_ITE_CODE,
    REFERENCE_X_ITE_SITE,
)
from x3d_validator.preprocessing.detection import EmbeddingDetection, EmbeddingTechnology

_QUOTE: Final[str] = r"['\"]"
_EMPTY_OR_CLOSED: Final[str] = r"\s*(?:/>|>\s*</script>)"

_X3DOM_SCRIPT: Final[re.Pattern[str]] = re.compile(
    rf"<script\s+type={_QUOTE}text/javascript{_QUOTE}\s+src={_QUOTE}"
    rf"https?://www\.x3dom\.org[^\s]*\.js{_QUOTE}{_EMPTY_OR_CLOSED}"
)
_X3DOM_STYLESHEET: Final[re.Pattern[str]] = re.compile(
    rf"<link\s+rel={_QUOTE}stylesheet{_QUOTE}\s+type={_QUOTE}text/css{_QUOTE}\s+href={_QUOTE}"
    rf"https?://www\.x3dom\.org[^\s]*\.css{_QUOTE}\s*/?>"
)
_X_ITE_STYLESHEET: Final[re.Pattern[str]] = re.compile(
    rf"<link\s+rel={_QUOTE}stylesheet{_QUOTE}\s+type={_QUOTE}text/css{_QUOTE}\s+href={_QUOTE}"
    + re.escape(REFERENCE_X_ITE_CODE)
    + rf"[^\s]*x_ite\.css{_QUOTE}\s*/?>"
)
_X_ITE_SCRIPT: Final[re.Pattern[str]] = re.compile(
    rf"<script\s+type={_QUOTE}text/javascript{_QUOTE}\s+src={_QUOTE}"
    + re.escape(REFERENCE_X_ITE_CODE)
    + rf"[^\s]*x_ite\.min\.js{_QUOTE}\s*>\s*</script>"
)


@dataclass(frozen=True, slots=True)
class ReferencesCheck:
    """Outcome of checking one page's script and stylesheet references."""

    name: str
    reference_url: str
    found_stylesheet: bool
    found_script: bool
    lines: tuple[str, ...]

    @property
    def passed(self) -> bool:
        return self.found_stylesheet and self.found_script

    def render(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)


def check_embedding_references(text: str, detection: EmbeddingDetection) -> ReferencesCheck | None:
    """Check the primary technology's references; ``None`` when nothing is embedded."""

    if not detection.html:
        return None
    technology = detection.primary
    if technology is EmbeddingTechnology.X3DOM:
        return _check_x3dom(text)
    if technology is EmbeddingTechnology.X_ITE:
        return _check_x_ite(text)
    if technology is EmbeddingTechnology.COBWEB:
        return ReferencesCheck(
            name="Cobweb Cascading Style Sheet (CSS) and JavaScript references check",
            reference_url=REFERENCE_COBWEB,
            found_stylesheet=False,
            found_script=False,
            lines=(f"Cobweb has been replaced by X_ITE, see {REFERENCE_X_ITE_SITE}",),
        )
    return None


def _check_x3dom(text: str) -> ReferencesCheck:
    lines: list[str] = []

    script = _X3DOM_SCRIPT.search(text)
    found_script = True
    if script is not None:
        lines.extend(("Found online x3dom.js statement:", script.group(0)))
    elif "x3dom.js" in text:
        lines.append("Found local x3dom.js statement")
    elif "x3dom-full.js" in text:
        lines.append("Found local x3dom-full.js statement")
    else:
        found_script = False
        lines.append("No X3DOM .js statement found")

    stylesheet = _X3DOM_STYLESHEET.search(text)
    found_stylesheet = True
    if stylesheet is not None:
        lines.extend(("Found online x3dom.css statement:", stylesheet.group(0)))
    elif "x3dom.css" in text:
        lines.append("Found local x3dom.css statement")
    else:
        found_stylesheet = False
        lines.append("No x3dom.css statement found")

    return ReferencesCheck(
        name="X3DOM JavaScript and Cascading Style Sheet (CSS) references check",
        reference_url=REFERENCE_X3DOM,
        found_stylesheet=found_stylesheet,
        found_script=found_script,
        lines=tuple(lines),
    )


def _check_x_ite(text: str) -> ReferencesCheck:
    lines: list[str] = []

    stylesheet = _X_ITE_STYLESHEET.search(text)
    if stylesheet is not None:
        lines.extend(("Found X_ITE .css statement:", stylesheet.group(0)))
    else:
        lines.append("No X_ITE .css statement found")

    script = _X_ITE_SCRIPT.search(text)
    if script is not None:
        lines.extend(("Found X_ITE .js statement:", script.group(0)))
    else:
        lines.append("No X_ITE .js statement found")

    return ReferencesCheck(
        name="X_ITE Cascading Style Sheet (CSS) and JavaScript references check",
        reference_url=REFERENCE_X_ITE_SITE,
        found_stylesheet=stylesheet is not None,
        found_script=script is not None,
        lines=tuple(lines),
    )


__all__ = ["ReferencesCheck", "check_embedding_references"]
