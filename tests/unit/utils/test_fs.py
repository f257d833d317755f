"""
x3d-validator — unit tests for filesystem utilities

File: tests/unit/utils/test_fs.py
Last updated: 2026-10-19

Purpose
- Validate atomic rewrites and scoped temporary files used by the pipeline.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from x3d_validator.utils.fs import atomic_write, scoped_temp_file


def test_atomic_write_text_and_bytes(tmp_path: Path) -> None:
    target = tmp_path / "scene.x3d"

    atomic_write(target, "<X3D/>\r\n")
    assert target.read_bytes() == b"<X3D/>\r\n"

    atomic_write(target, b"<X3D></X3D>")
    assert target.read_bytes() == b"<X3D></X3D>"
    assert [path.name for path in tmp_path.iterdir()] == ["scene.x3d"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_atomic_write_preserves_permission_bits(tmp_path: Path) -> None:
    target = tmp_path / "scene.x3d"
    target.write_text("old", encoding="utf-8")
    target.chmod(0o640)

    atomic_write(target, "new")

    assert stat.S_IMODE(target.stat().st_mode) == 0o640
    assert target.read_text(encoding="utf-8") == "new"


def test_atomic_write_requires_existing_parent(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        atomic_write(tmp_path / "missing" / "scene.x3d", "x")


def test_scoped_temp_file_is_removed_on_exit(tmp_path: Path) -> None:
    with scoped_temp_file("<X3D/>", prefix="modelExcerpt-", directory=tmp_path) as path:
        assert path.name.startswith("modelExcerpt-")
        assert path.suffix == ".x3d"
        assert path.read_text(encoding="utf-8") == "<X3D/>"

    assert not path.exists()


def test_scoped_temp_file_is_removed_on_exception(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError), scoped_temp_file("x", directory=tmp_path) as path:
        raise RuntimeError("stage failed")

    assert not path.exists()
    assert list(tmp_path.iterdir()) == []
