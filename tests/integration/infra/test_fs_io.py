from __future__ import annotations

"""
Integration tests for FileSystem Infrastructure.

Verifies path normalization, dated snapshot naming and atomic writes
against the real filesystem.
"""

import os
from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest

from gallerysnap.infra.fs import (
    default_snapshot_filename,
    normalize_path,
    write_text_atomic,
)


def test_normalize_path_expands_user_and_fallback(tmp_path: Path) -> None:
    assert normalize_path("", str(tmp_path)) == str(tmp_path)
    assert normalize_path("~", "x") == os.path.abspath(os.path.expanduser("~"))


def test_normalize_path_expands_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GALLERYSNAP_TEST_DIR", str(tmp_path))
    assert normalize_path("$GALLERYSNAP_TEST_DIR/out.afm", "x") == str(tmp_path / "out.afm")


def test_default_snapshot_filename() -> None:
    assert default_snapshot_filename(date(2024, 5, 1)) == "instant_oss_snapshot_2024-05-01.afm"


def test_write_text_atomic(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "snap.afm"
    written = write_text_atomic(str(target), "{\"name\": \"ñ\"}")

    assert target.read_text(encoding="utf-8") == "{\"name\": \"ñ\"}"
    assert written == len("{\"name\": \"ñ\"}".encode("utf-8"))
    assert [p.name for p in target.parent.iterdir()] == ["snap.afm"]


def test_write_text_atomic_keeps_previous_on_failure(tmp_path: Path) -> None:
    target = tmp_path / "snap.afm"
    target.write_text("old", encoding="utf-8")

    with patch("gallerysnap.infra.fs.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            write_text_atomic(str(target), "new")

    assert target.read_text(encoding="utf-8") == "old"
    assert [p.name for p in tmp_path.iterdir() if p.name != "user_data"] == ["snap.afm"]
