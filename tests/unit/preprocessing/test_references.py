"""
x3d-validator — unit tests for embedding script/stylesheet reference checks

File: tests/unit/preprocessing/test_references.py
Last updated: 2026-10-19
"""

from __future__ import annotations

from x3d_validator.constants import REFERENCE_COBWEB, REFERENCE_X3DOM, REFERENCE_X_ITE_SITE
from x3d_validator.preprocessing import EmbeddingDetection, check_embedding_references

X3DOM_PAGE = EmbeddingDetection(html=True, x3dom=True)
X_ITE_PAGE = EmbeddingDetection(html=True, x_ite=True)

ONLINE_SCRIPT = (
    "<script type='text/javascript' src='https://www.x3dom.org/download/x3dom.js'>"
    "</script>"
)
ONLINE_STYLESHEET = (
    "<link rel='stylesheet' type='text/css' href='https://www.x3dom.org/download/x3dom.css'/>"
)


def test_no_html_wrapper_means_no_check() -> None:
    assert check_embedding_references("<X3D/>", EmbeddingDetection(x3dom=True)) is None
    assert check_embedding_references("<html/>", EmbeddingDetection(html=True)) is None


def test_online_x3dom_references_pass() -> None:
    text = f"<html><head>{ONLINE_SCRIPT}\n{ONLINE_STYLESHEET}</head></html>"

    check = check_embedding_references(text, X3DOM_PAGE)

    assert check is not None
    assert check.passed
    assert check.reference_url == REFERENCE_X3DOM
    assert check.lines == (
        "Found online x3dom.js statement:",
        ONLINE_SCRIPT,
        "Found online x3dom.css statement:",
        ONLINE_STYLESHEET,
    )


def test_local_x3dom_references_pass() -> None:
    text = "<script src='x3dom.js'></script><link rel='stylesheet' href='x3dom.css'/>"

    check = check_embedding_references(text, X3DOM_PAGE)

    assert check is not None
    assert check.passed
    assert check.render() == (
        "Found local x3dom.js statement\nFound local x3dom.css statement\n"
    )


def test_local_full_build_counts_as_script() -> None:
    check = check_embedding_references("<script src='lib/x3dom-full.js'></script>", X3DOM_PAGE)

    assert check is not None
    assert check.found_script
    assert not check.found_stylesheet
    assert check.lines == ("Found local x3dom-full.js statement", "No x3dom.css statement found")
    assert not check.passed


def test_missing_x3dom_references_fail() -> None:
    check = check_embedding_references("<html><X3D/></html>", X3DOM_PAGE)

    assert check is not None
    assert check.name == "X3DOM JavaScript and Cascading Style Sheet (CSS) references check"
    assert check.lines == ("No X3DOM .js statement found", "No x3dom.css statement found")
    assert not check.passed


def test_x_ite_references_pass() -> None:
    base = "https://create3000.github.io/code/x_ite/latest/dist/"
    stylesheet = f'<link rel="stylesheet" type="text/css" href="{base}x_ite.css"/>'
    script = f'<script type="text/javascript" src="{base}x_ite.min.js"></script>'

    check = check_embedding_references(f"{stylesheet}\n{script}", X_ITE_PAGE)

    assert check is not None
    assert check.passed
    assert check.reference_url == REFERENCE_X_ITE_SITE
    assert check.lines == (
        "Found X_ITE .css statement:",
        stylesheet,
        "Found X_ITE .js statement:",
        script,
    )


def test_x_ite_without_references_fails() -> None:
    check = check_embedding_references("<html><X3DCanvas src='a.x3d'/></html>", X_ITE_PAGE)

    assert check is not None
    assert check.lines == ("No X_ITE .css statement found", "No X_ITE .js statement found")
    assert not check.passed


def test_cobweb_always_fails_with_replacement_notice() -> None:
    check = check_embedding_references("cobweb.js", EmbeddingDetection(html=True, cobweb=True))

    assert check is not None
    assert not check.passed
    assert check.reference_url == REFERENCE_COBWEB
    assert check.lines == (f"Cobweb has been replaced by X_ITE, see {REFERENCE_X_ITE_SITE}",)
