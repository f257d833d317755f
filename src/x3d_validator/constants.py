"""Stable strings shared across the scanning, doctype and pipeline layers."""

from __future__ import annotations

from typing import Final

# XML prolog synthesized for extracted scene fragments.
XML_DECLARATION: Final[str] = '<?xml version="1.0" encoding="UTF-8"?>'

# Known X3D specification versions, newest first.
FINAL_VERSIONS: Final[tuple[str, ...]] = ("4.1", "4.0", "3.3", "3.2", "3.1", "3.0")
TRANSITIONAL_VERSIONS: Final[tuple[str, ...]] = ("3.1", "3.0")

# Versions whose final DOCTYPE may still reference the plain-http specification host.
HTTP_TOLERANT_VERSIONS: Final[frozenset[str]] = frozenset({"4.0", "3.3", "3.2", "3.1", "3.0"})

WARNING_COMMENT: Final[str] = "<!--Warning:  transitional DOCTYPE in source .x3d file-->\n"

ERROR_TOKEN: Final[str] = "[Error]"
WARNING_TOKEN: Final[str] = "[Warning]"

# Specification host references rewritten from http to https before validation.
INSECURE_SPECIFICATION_PREFIX: Final[str] = "http://www.web3d.org/specifications/"
SECURE_SPECIFICATION_PREFIX: Final[str] = "https://www.web3d.org/specifications/"

# Report reference links.
REFERENCE_URL_WELL_FORMED: Final[str] = (
    "https://en.wikipedia.org/wiki/XML#Well-formedness_and_error-handling"
)
REFERENCE_URL_DOCTYPE: Final[str] = (
    "https://www.web3d.org/x3d/content/examples/X3dSceneAuthoringHints.html#Validation"
)
REFERENCE_URL_DTD_SCHEMA: Final[str] = "https://www.web3d.org/specifications"
REFERENCE_URL_SCHEMATRON: Final[str] = (
    "https://www.web3d.org/x3d/tools/schematron/X3dSchematron.html"
)
REFERENCE_URL_CLASSIC_VRML: Final[str] = (
    "https://www.web3d.org/x3d/stylesheets/X3dToX3dvClassicVrmlEncoding.xslt"
)
REFERENCE_URL_REGEX: Final[str] = "https://www.web3d.org/specifications/X3dRegularExpressions.html"
REFERENCE_URL_TIDY: Final[str] = "https://www.web3d.org/x3d/stylesheets/X3dTidy.html"
REFERENCE_URL_PRETTY_PRINT: Final[str] = "https://www.web3d.org/x3d/stylesheets/X3dToXhtml.xslt"
REFERENCE_URL_AUTHORING_SUPPORT: Final[str] = (
    "https://www.web3d.org/x3d/content/examples/X3dResources.html#AuthoringSupport"
)

REFERENCE_X3DOM: Final[str] = "https://www.x3dom.org"
REFERENCE_X3DOM_LEGACY: Final[str] = "http://www.x3dom.org"
REFERENCE_X_ITE_SITE: Final[str] = "https://github.com/create3000/x_ite/wiki"
REFERENCE_X_ITE_CODE: Final[str] = "https://create3000.github.io/code/x_ite/latest/dist/"
REFERENCE_COBWEB: Final[str] = "http://create3000.de/x_ite"

# Stylesheets resolved relative to ``transforms.stylesheet_dir``.
STYLESHEET_CLASSIC_VRML: Final[str] = "X3dToX3dvClassicVrmlEncoding.xslt"
STYLESHEET_SCHEMATRON: Final[str] = "X3dSchematronValidityChecks.xslt"
STYLESHEET_SVRL_TEXT: Final[str] = "SvrlReportText.xslt"
STYLESHEET_TIDY: Final[str] = "X3dTidy.xslt"
STYLESHEET_PRETTY_PRINT: Final[str] = "X3dToXhtml.xslt"

__all__ = [
    "ERROR_TOKEN",
    "FINAL_VERSIONS",
    "HTTP_TOLERANT_VERSIONS",
    "INSECURE_SPECIFICATION_PREFIX",
    "REFERENCE_COBWEB",
    "REFERENCE_URL_AUTHORING_SUPPORT",
    "REFERENCE_URL_CLASSIC_VRML",
    "REFERENCE_URL_DOCTYPE",
    "REFERENCE_URL_DTD_SCHEMA",
    "REFERENCE_URL_PRETTY_PRINT",
    "REFERENCE_URL_REGEX",
    "REFERENCE_URL_SCHEMATRON",
    "REFERENCE_URL_TIDY",
    "REFERENCE_URL_WELL_FORMED",
    "REFERENCE_X3DOM",
    "REFERENCE_X3DOM_LEGACY",
    "REFERENCE_X_ITE_CODE",
    "REFERENCE_X_ITE_SITE",
    "SECURE_SPECIFICATION_PREFIX",
    "STYLESHEET_CLASSIC_VRML",
    "STYLESHEET_PRETTY_PRINT",
    "STYLESHEET_SCHEMATRON",
    "STYLESHEET_SVRL_TEXT",
    "STYLESHEET_TIDY",
    "TRANSITIONAL_VERSIONS",
    "WARNING_COMMENT",
    "WARNING_TOKEN",
    "XML_DECLARATION",
]
