from __future__ import annotations

from pathlib import Path

from dply.core.result import Err, Ok
from dply.release.notes import resolve_release_notes


def test_literal_text() -> None:
    assert resolve_release_notes(text="Fixes #12", path=None) == Ok("Fixes #12")


def test_no_notes() -> None:
    assert resolve_release_notes(text=None, path=None) == Ok(None)


def test_file_contents(tmp_path: Path) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("# 1.2.0\n\n- faster checkout\n", encoding="utf-8")
    assert resolve_release_notes(text=None, path=notes) == Ok("# 1.2.0\n\n- faster checkout\n")


def test_unreadable_file_is_io_error(tmp_path: Path) -> None:
    result = resolve_release_notes(text=None, path=tmp_path / "missing.md")
    assert isinstance(result, Err)
    assert result.error.kind == "io_error"


def test_text_and_file_are_exclusive(tmp_path: Path) -> None:
    result = resolve_release_notes(text="x", path=tmp_path / "notes.md")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
