"""
x3d-validator — unit tests for lxml-backed validation and transformation

File: tests/unit/collaborators/test_lxml_services.py
Last updated: 2026-10-19

Purpose
- Validate well-formedness, DTD and schema checks plus XSLT application
  against tiny local documents.

Functional requirements
- Offline operation: every DTD, schema and stylesheet lives in ``tmp_path``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from x3d_validator.collaborators import (
    LxmlTransformationService,
    LxmlValidationService,
    TransformationService,
    ValidationService,
)
from x3d_validator.domain.errors import CollaboratorError

if TYPE_CHECKING:
    from pathlib import Path

SCHEMA = """<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="X3D">
    <xs:complexType>
      <xs:sequence>
        <xs:element name="Scene" minOccurs="0"/>
      </xs:sequence>
      <xs:attribute name="version" type="xs:string" use="required"/>
      <xs:anyAttribute namespace="http://www.w3.org/2001/XMLSchema-instance" processContents="skip"/>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""

STYLESHEET = """<?xml version="1.0" encoding="UTF-8"?>
<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:output method="text"/>
  <xsl:param name="greeting" select="'hello'"/>
  <xsl:template match="/">
    <xsl:value-of select="$greeting"/>
    <xsl:text> </xsl:text>
    <xsl:value-of select="name(/*)"/>
  </xsl:template>
</xsl:stylesheet>
"""

TERMINATING_STYLESHEET = """<?xml version="1.0" encoding="UTF-8"?>
<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:template match="/">
    <xsl:message terminate="yes">stop here</xsl:message>
  </xsl:template>
</xsl:stylesheet>
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_services_satisfy_protocols(tmp_path: Path) -> None:
    assert isinstance(LxmlValidationService(), ValidationService)
    assert isinstance(LxmlTransformationService(tmp_path), TransformationService)


# ---------------------------------------------------------------------------
# Well-formedness
# ---------------------------------------------------------------------------


def test_well_formed_document_has_no_diagnostics(tmp_path: Path) -> None:
    scene = _write(tmp_path / "scene.x3d", '<X3D version="4.0"><Scene/></X3D>')

    outcome = LxmlValidationService().check_well_formed(scene)

    assert not outcome.error
    assert outcome.text == ""


def test_malformed_document_reports_fatal_error_block(tmp_path: Path) -> None:
    scene = _write(tmp_path / "scene.x3d", '<X3D version="4.0">\n<Scene>\n</X3D>')

    outcome = LxmlValidationService().check_well_formed(scene)

    assert outcome.error
    assert outcome.text.startswith("Error type: Fatal error\nXMLSyntaxError:\n")
    assert "(line " in outcome.text


def test_well_formedness_ignores_missing_dtd(tmp_path: Path) -> None:
    scene = _write(
        tmp_path / "scene.x3d",
        '<!DOCTYPE X3D SYSTEM "missing.dtd">\n<X3D version="4.0"/>',
    )

    assert not LxmlValidationService().check_well_formed(scene).error


# ---------------------------------------------------------------------------
# DTD validation
# ---------------------------------------------------------------------------


def test_dtd_validation_against_local_dtd(tmp_path: Path) -> None:
    _write(
        tmp_path / "x3d.dtd",
        '<!ELEMENT X3D (Scene)>\n<!ATTLIST X3D version CDATA #REQUIRED>\n<!ELEMENT Scene EMPTY>\n',
    )
    valid = _write(
        tmp_path / "valid.x3d",
        '<!DOCTYPE X3D SYSTEM "x3d.dtd">\n<X3D version="4.0"><Scene/></X3D>',
    )
    invalid = _write(
        tmp_path / "invalid.x3d",
        '<!DOCTYPE X3D SYSTEM "x3d.dtd">\n<X3D version="4.0"><Shape/></X3D>',
    )
    service = LxmlValidationService()

    assert not service.validate_dtd(valid).error
    outcome = service.validate_dtd(invalid)
    assert outcome.error
    assert "XMLSyntaxError:" in outcome.text


# ---------------------------------------------------------------------------
# Schema validation
# ---------------------------------------------------------------------------


def test_schema_validation_with_configured_schema(tmp_path: Path) -> None:
    schema = _write(tmp_path / "x3d.xsd", SCHEMA)
    valid = _write(tmp_path / "valid.x3d", '<X3D version="4.0"><Scene/></X3D>')
    invalid = _write(tmp_path / "invalid.x3d", "<X3D><Scene/></X3D>")
    service = LxmlValidationService(schema_path=schema)

    assert not service.validate_schema(valid).error
    outcome = service.validate_schema(invalid)
    assert outcome.error
    assert "XMLSchemaValidationError:" in outcome.text


def test_schema_validation_with_relative_declared_location(tmp_path: Path) -> None:
    _write(tmp_path / "x3d.xsd", SCHEMA)
    scene = _write(
        tmp_path / "scene.x3d",
        '<X3D xmlns:xsd="http://www.w3.org/2001/XMLSchema-instance" '
        'xsd:noNamespaceSchemaLocation="x3d.xsd" version="4.0"/>',
    )

    assert not LxmlValidationService().validate_schema(scene).error


def test_schema_validation_without_schema_fails(tmp_path: Path) -> None:
    scene = _write(tmp_path / "scene.x3d", '<X3D version="4.0"/>')

    outcome = LxmlValidationService().validate_schema(scene)

    assert outcome.error
    assert "no XML Schema available" in outcome.text


def test_remote_schema_needs_network(tmp_path: Path) -> None:
    scene = _write(
        tmp_path / "scene.x3d",
        '<X3D xmlns:xsd="http://www.w3.org/2001/XMLSchema-instance" '
        'xsd:noNamespaceSchemaLocation="https://www.web3d.org/specifications/x3d-4.0.xsd" '
        'version="4.0"/>',
    )

    outcome = LxmlValidationService(allow_network=False).validate_schema(scene)

    assert outcome.error
    assert "network access is disabled" in outcome.text


# ---------------------------------------------------------------------------
# XSLT
# ---------------------------------------------------------------------------


def test_transform_applies_stylesheet_and_parameters(tmp_path: Path) -> None:
    _write(tmp_path / "Greeting.xslt", STYLESHEET)
    scene = _write(tmp_path / "scene.x3d", '<X3D version="4.0"/>')
    service = LxmlTransformationService(tmp_path)

    default = service.transform(scene, "Greeting.xslt")
    custom = service.transform(scene, "Greeting.xslt", {"greeting": "it's"})

    assert not default.error
    assert default.output.strip() == "hello X3D"
    assert custom.output.strip() == "it's X3D"


def test_transform_termination_is_error_outcome(tmp_path: Path) -> None:
    _write(tmp_path / "Stop.xslt", TERMINATING_STYLESHEET)
    scene = _write(tmp_path / "scene.x3d", "<X3D/>")

    outcome = LxmlTransformationService(tmp_path).transform(scene, "Stop.xslt")

    assert outcome.error
    assert outcome.output == ""
    assert any("stop here" in message for message in outcome.messages)


def test_transform_of_malformed_document_is_error_outcome(tmp_path: Path) -> None:
    _write(tmp_path / "Greeting.xslt", STYLESHEET)
    scene = _write(tmp_path / "scene.x3d", "<X3D>")

    outcome = LxmlTransformationService(tmp_path).transform(scene, "Greeting.xslt")

    assert outcome.error
    assert outcome.messages


def test_missing_stylesheet_raises(tmp_path: Path) -> None:
    scene = _write(tmp_path / "scene.x3d", "<X3D/>")

    with pytest.raises(CollaboratorError, match="stylesheet not found"):
        LxmlTransformationService(tmp_path).transform(scene, "Missing.xslt")


def test_uncompilable_stylesheet_raises(tmp_path: Path) -> None:
    _write(tmp_path / "Broken.xslt", "<xsl:stylesheet")
    scene = _write(tmp_path / "scene.x3d", "<X3D/>")

    with pytest.raises(CollaboratorError, match="unable to compile stylesheet"):
        LxmlTransformationService(tmp_path).transform(scene, "Broken.xslt")
