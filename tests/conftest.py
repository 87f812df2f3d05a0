from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Image factories (Pillow) and ingestion entry helpers shared by the
   tree, transcoder and snapshot tests.
3. An isolated user data directory so no test touches the real config.
"""

import io
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

import pytest
from PIL import Image

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from gallerysnap.core.resources import ResourceRegistry  # noqa: E402
from gallerysnap.domain.snapshot_models import FileEntry  # noqa: E402
from gallerysnap.domain.tree_models import BytesSource  # noqa: E402


# -----------------------------------------------------------------------------
# Image Helpers
# -----------------------------------------------------------------------------
def make_image_bytes(
        size: Tuple[int, int],
        fmt: str = "PNG",
        mode: str = "RGB",
        color: Any = (200, 40, 40),
) -> bytes:
    """Encode a solid-color image of ``size`` in ``fmt``."""
    img = Image.new(mode, size, color)
    buffer = io.BytesIO()
    img.save(buffer, fmt)
    return buffer.getvalue()


def make_entry(rel_path: str, data: bytes, media_type: str = "image/png") -> FileEntry:
    """Build an in-memory ingestion entry."""
    name = rel_path.rsplit("/", 1)[-1]
    return FileEntry(rel_path=rel_path, source=BytesSource(data, name, media_type), media_type=media_type)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    """Factory fixture returning encoded image bytes."""
    return make_image_bytes


@pytest.fixture
def registry() -> ResourceRegistry:
    reg = ResourceRegistry()
    yield reg
    reg.release_all()


@pytest.fixture
def scenario_entries() -> list:
    """
    Entries of the reference scenario:
    photos/a.png (2000x1000) and photos/sub/b.png (500x500).
    """
    return [
        make_entry("photos/a.png", make_image_bytes((2000, 1000))),
        make_entry("photos/sub/b.png", make_image_bytes((500, 500))),
    ]


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    """
    Create a directory of images for scanner and engine tests.

    Structure:
    /photos
      a.png            (40x20)
      notes.txt
      .DS_Store
      /sub
        b.jpg          (30x30)
      /.cache
        hidden.png
    """
    root = tmp_path / "photos"
    (root / "sub").mkdir(parents=True)
    (root / ".cache").mkdir()

    (root / "a.png").write_bytes(make_image_bytes((40, 20)))
    (root / "sub" / "b.jpg").write_bytes(make_image_bytes((30, 30), fmt="JPEG"))
    (root / ".cache" / "hidden.png").write_bytes(make_image_bytes((10, 10)))
    (root / "notes.txt").write_text("not an image", encoding="utf-8")
    (root / ".DS_Store").write_bytes(b"\x00\x01")

    return root


@pytest.fixture
def mock_config_dict(tmp_path: Path, image_dir: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'gallerysnap.domain.config'.
    """
    return {
        "input_path": str(image_dir),
        "output_path": str(tmp_path / "out" / "snapshot.afm"),
        "short_edge_target": 1024,
        "jpeg_quality": 85,
        "include_hidden": False,
        "max_snapshot_mb": 0,
        "pretty_json": False,
    }


@pytest.fixture(autouse=True)
def isolated_user_data(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user data directory at a temporary location."""
    data_dir = tmp_path / "user_data"
    monkeypatch.setattr(
        "gallerysnap.infra.fs.get_user_data_dir", lambda: str(data_dir)
    )
    monkeypatch.setattr(
        "gallerysnap.domain.config.get_user_data_dir", lambda: str(data_dir)
    )
    return data_dir
