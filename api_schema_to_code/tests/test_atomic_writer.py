"""
Tests for the atomic writer.
"""

from __future__ import annotations

import pytest

from api_schema_to_code.pipeline.errors import OutputWriteError
from api_schema_to_code.pipeline.patcher import AtomicWriter


def test_write_creates_parents(tmp_path):
    """Missing directories are created."""
    path = tmp_path / "pkg" / "objects.py"
    AtomicWriter().write(path, "x = 1\n")
    assert path.read_text(encoding="utf-8") == "x = 1\n"


def test_write_replaces_existing(tmp_path):
    """An existing file is replaced whole."""
    path = tmp_path / "objects.py"
    path.write_text("old = 1\n", encoding="utf-8")
    AtomicWriter().write(path, "new = 2\n")
    assert path.read_text(encoding="utf-8") == "new = 2\n"
    assert list(tmp_path.iterdir()) == [path]


def test_invalid_python_is_not_written(tmp_path):
    """Content that does not parse leaves the target untouched."""
    path = tmp_path / "objects.py"
    path.write_text("old = 1\n", encoding="utf-8")
    with pytest.raises(OutputWriteError):
        AtomicWriter().write(path, "class :\n")
    assert path.read_text(encoding="utf-8") == "old = 1\n"
    assert list(tmp_path.iterdir()) == [path]


def test_validation_can_be_skipped(tmp_path):
    """Validation is optional."""
    path = tmp_path / "objects.py"
    AtomicWriter().write(path, "class :\n", validate=False)
    assert path.read_text(encoding="utf-8") == "class :\n"


def test_custom_validator(tmp_path):
    """A custom validator replaces the default one."""

    def reject_all(content):
        raise OutputWriteError("rejected")

    with pytest.raises(OutputWriteError):
        AtomicWriter(validate=reject_all).write(tmp_path / "x.py", "x = 1\n")
    assert not (tmp_path / "x.py").exists()


def test_non_atomic_write(tmp_path):
    """Writes can go straight to the target."""
    path = tmp_path / "objects.py"
    AtomicWriter(atomic=False).write(path, "x = 1\n")
    assert path.read_text(encoding="utf-8") == "x = 1\n"


def test_unwritable_target(tmp_path):
    """File system errors are reported as output errors."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(OutputWriteError):
        AtomicWriter().write(blocker / "objects.py", "x = 1\n")
