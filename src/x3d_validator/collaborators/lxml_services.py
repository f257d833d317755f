"""
x3d-validator — lxml-backed validation and transformation services

File: src/x3d_validator/collaborators/lxml_services.py
Last updated: 2026-10-19

Purpose
- Implements ``ValidationService`` and ``TransformationService`` on top of
  libxml2/libxslt through lxml.

Functional requirements
- Well-formedness parsing never loads the DTD and never resolves entities.
- DTD validation loads the declared DTD; remote DTDs are only fetched when
  ``allow_network`` is set.
- Schema validation uses ``schema_path`` when configured, otherwise the
  document's ``xsd:noNamespaceSchemaLocation``.
- Missing or uncompilable stylesheets raise ``CollaboratorError`` so the
  pipeline records a stage fault.

Non-functional requirements
- Compiled stylesheets are cached per service instance.
- libxslt implements XSLT 1.0 only; XSLT 2.0 stylesheets need the command
  engine.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Final

import structlog
from lxml import etree

from x3d_validator.collaborators.base import (
    DiagnosticSeverity,
    ServiceOutcome,
    TransformOutcome,
    render_diagnostic,
)
from x3d_validator.domain.errors import CollaboratorError

_SCHEMA_INSTANCE_NS: Final[str] = "http://www.w3.org/2001/XMLSchema-instance"
_NO_NAMESPACE_SCHEMA_LOCATION: Final[str] = f"{{{_SCHEMA_INSTANCE_NS}}}noNamespaceSchemaLocation"
_REMOTE_PREFIXES: Final[tuple[str, ...]] = ("http://", "https://")

_SYNTAX_ERROR: Final[str] = "XMLSyntaxError"
_SCHEMA_ERROR: Final[str] = "XMLSchemaValidationError"


def _severity_for(entry: etree._LogEntry) -> DiagnosticSeverity:
    if entry.level >= etree.ErrorLevels.FATAL:
        return DiagnosticSeverity.FATAL
    if entry.level >= etree.ErrorLevels.ERROR:
        return DiagnosticSeverity.ERROR
    return DiagnosticSeverity.WARNING


def _describe_entry(entry: etree._LogEntry) -> str:
    message = entry.message.strip()
    if entry.line:
        return f"{message} (line {entry.line}, column {entry.column})"
    return message


def _outcome_from_log(entries: Iterable[etree._LogEntry], exception_type: str) -> ServiceOutcome:
    diagnostics: list[str] = []
    error = False
    for entry in entries:
        if entry.level < etree.ErrorLevels.WARNING:
            continue
        severity = _severity_for(entry)
        error = error or severity.is_error
        diagnostics.append(render_diagnostic(severity, exception_type, _describe_entry(entry)))
    return ServiceOutcome(error=error, diagnostics=tuple(diagnostics))


def _failure(message: str, exception_type: str = _SYNTAX_ERROR) -> ServiceOutcome:
    return ServiceOutcome(
        error=True,
        diagnostics=(render_diagnostic(DiagnosticSeverity.ERROR, exception_type, message),),
    )


def _is_remote(location: str) -> bool:
    return location.startswith(_REMOTE_PREFIXES)


class LxmlValidationService:
    """XML well-formedness, DTD and XML Schema checks."""

    def __init__(
        self,
        *,
        allow_network: bool = False,
        schema_path: Path | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._allow_network = allow_network
        self._schema_path = schema_path
        self._schemas: dict[str, etree.XMLSchema] = {}
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def _parser(self, *, dtd_validation: bool = False) -> etree.XMLParser:
        return etree.XMLParser(
            load_dtd=dtd_validation,
            dtd_validation=dtd_validation,
            no_network=not self._allow_network,
            resolve_entities=False,
        )

    def check_well_formed(self, path: Path) -> ServiceOutcome:
        parser = self._parser()
        try:
            etree.parse(str(path), parser)
        except etree.XMLSyntaxError as exc:
            return _outcome_from_log(exc.error_log, _SYNTAX_ERROR)
        return _outcome_from_log(parser.error_log, _SYNTAX_ERROR)

    def validate_dtd(self, path: Path) -> ServiceOutcome:
        parser = self._parser(dtd_validation=True)
        try:
            etree.parse(str(path), parser)
        except etree.XMLSyntaxError as exc:
            outcome = _outcome_from_log(exc.error_log, _SYNTAX_ERROR)
            if outcome.error:
                return outcome
            return _failure(str(exc))
        return _outcome_from_log(parser.error_log, _SYNTAX_ERROR)

    def validate_schema(self, path: Path) -> ServiceOutcome:
        try:
            tree = etree.parse(str(path), self._parser())
        except etree.XMLSyntaxError as exc:
            return _outcome_from_log(exc.error_log, _SYNTAX_ERROR)

        location = self._schema_location(tree, path)
        if location is None:
            return _failure(
                "no XML Schema available: set validation.schema_path or declare "
                "xsd:noNamespaceSchemaLocation on the X3D element",
                _SCHEMA_ERROR,
            )
        if _is_remote(location) and not self._allow_network:
            return _failure(
                f"XML Schema {location} is remote and network access is disabled; "
                "set validation.schema_path to a local copy or enable validation.allow_network",
                _SCHEMA_ERROR,
            )

        try:
            schema = self._load_schema(location)
        except (etree.XMLSchemaParseError, etree.XMLSyntaxError, OSError) as exc:
            return _failure(f"unable to load XML Schema {location}: {exc}", _SCHEMA_ERROR)

        schema.validate(tree)
        return _outcome_from_log(schema.error_log, _SCHEMA_ERROR)

    def _schema_location(self, tree: etree._ElementTree, path: Path) -> str | None:
        if self._schema_path is not None:
            return str(self._schema_path)
        declared = tree.getroot().get(_NO_NAMESPACE_SCHEMA_LOCATION)
        if not declared:
            return None
        declared = declared.strip()
        if _is_remote(declared):
            return declared
        return str((path.parent / declared).resolve())

    def _load_schema(self, location: str) -> etree.XMLSchema:
        cached = self._schemas.get(location)
        if cached is not None:
            return cached
        document = etree.parse(location, etree.XMLParser(no_network=not self._allow_network))
        schema = etree.XMLSchema(document)
        self._schemas[location] = schema
        self._logger.debug("schema_loaded", location=location)
        return schema


class LxmlTransformationService:
    """Applies XSLT 1.0 stylesheets found under ``stylesheet_dir``."""

    def __init__(
        self,
        stylesheet_dir: Path,
        *,
        allow_network: bool = False,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._stylesheet_dir = stylesheet_dir
        self._allow_network = allow_network
        self._compiled: dict[str, etree.XSLT] = {}
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def transform(
        self,
        path: Path,
        stylesheet: str,
        parameters: Mapping[str, str] | None = None,
    ) -> TransformOutcome:
        xslt = self._compile(stylesheet)
        parser = etree.XMLParser(no_network=not self._allow_network, resolve_entities=False)
        try:
            document = etree.parse(str(path), parser)
        except etree.XMLSyntaxError as exc:
            return TransformOutcome(error=True, messages=_messages(exc.error_log))

        arguments = {
            name: etree.XSLT.strparam(value) for name, value in (parameters or {}).items()
        }
        try:
            result = xslt(document, **arguments)
        except etree.XSLTApplyError as exc:
            messages = _messages(xslt.error_log) or (str(exc),)
            return TransformOutcome(error=True, messages=messages)

        output = str(result)
        self._logger.debug(
            "transform_applied",
            stylesheet=stylesheet,
            output_length=len(output),
        )
        return TransformOutcome(error=False, output=output, messages=_messages(xslt.error_log))

    def _compile(self, stylesheet: str) -> etree.XSLT:
        cached = self._compiled.get(stylesheet)
        if cached is not None:
            return cached
        stylesheet_path = self._stylesheet_dir / stylesheet
        if not stylesheet_path.is_file():
            raise CollaboratorError(f"stylesheet not found: {stylesheet_path}")
        try:
            compiled = etree.XSLT(etree.parse(str(stylesheet_path)))
        except (etree.XSLTParseError, etree.XMLSyntaxError) as exc:
            raise CollaboratorError(
                f"unable to compile stylesheet {stylesheet_path}: {exc}"
            ) from exc
        self._compiled[stylesheet] = compiled
        return compiled


def _messages(entries: Iterable[etree._LogEntry]) -> tuple[str, ...]:
    return tuple(entry.message.strip() for entry in entries if entry.message.strip())


__all__ = ["LxmlTransformationService", "LxmlValidationService"]
