from __future__ import annotations

"""
Unit tests for the Snapshot Serializer.

Verifies:
1. Depth-first output shape, children order and isDeleted mirroring.
2. One progress callback per file, in discovery order, never for folders.
3. Per-file failure isolation versus tree-level failure (SnapshotExportError).
"""

import json
from typing import List
from unittest.mock import MagicMock

import pytest

from gallerysnap.core.ingestion.builder import build_tree
from gallerysnap.core.snapshot.serializer import (
    build_snapshot,
    count_encoded,
    encode_snapshot,
    export_snapshot,
    serialize_tree,
)
from gallerysnap.domain.errors import SnapshotExportError
from gallerysnap.domain.tree_models import Node, NodeType


@pytest.fixture
def tree(scenario_entries, registry):
    return build_tree(scenario_entries, registry)


def _fake_transcoder(calls: List[str]) -> MagicMock:
    transcoder = MagicMock()

    def _transcode(source):
        calls.append(source.name)
        return f"data:image/jpeg;base64,{source.name}"

    transcoder.transcode.side_effect = _transcode
    return transcoder


def test_serialized_shape(tree) -> None:
    calls: List[str] = []
    out = serialize_tree(tree.root, _fake_transcoder(calls))

    assert out["type"] == "folder"
    assert out["path"] == ""
    assert out["isDeleted"] is False
    assert "parent" not in out

    photos = out["children"][0]
    assert [c["name"] for c in photos["children"]] == ["a.png", "sub"]
    a = photos["children"][0]
    assert a == {
        "id": "photos/a.png",
        "name": "a.png",
        "path": "photos/a.png",
        "type": "file",
        "children": [],
        "isDeleted": False,
        "thumbnailData": "data:image/jpeg;base64,a.png",
    }
    assert photos["children"][1]["children"][0]["path"] == "photos/sub/b.png"


def test_progress_fires_once_per_file_in_order(tree) -> None:
    calls: List[str] = []
    seen: List[List[str]] = []

    serialize_tree(tree.root, _fake_transcoder(calls), lambda: seen.append(list(calls)))

    # Each callback happens right after its own file, before the next one starts
    assert seen == [["a.png"], ["a.png", "b.png"]]


def test_is_deleted_frozen_at_export_time(tree) -> None:
    tree.all_images[1].is_deleted = True
    out = serialize_tree(tree.root, _fake_transcoder([]))

    b = out["children"][0]["children"][1]["children"][0]
    assert b["isDeleted"] is True
    assert out["children"][0]["children"][0]["isDeleted"] is False


def test_file_failure_does_not_abort_siblings(tree) -> None:
    transcoder = MagicMock()
    transcoder.transcode.side_effect = [RuntimeError("boom"), "data:image/jpeg;base64,QQ=="]
    progress = MagicMock()

    out = serialize_tree(tree.root, transcoder, progress)

    a = out["children"][0]["children"][0]
    b = out["children"][0]["children"][1]["children"][0]
    assert "thumbnailData" not in a
    assert b["thumbnailData"] == "data:image/jpeg;base64,QQ=="
    assert progress.call_count == 2
    assert count_encoded(out) == 1


def test_empty_payload_is_omitted(tree) -> None:
    transcoder = MagicMock()
    transcoder.transcode.return_value = ""

    out = serialize_tree(tree.root, transcoder)
    assert count_encoded(out) == 0


def test_file_without_source_is_not_transcoded() -> None:
    node = Node(id="/x", name="x", path="x", type=NodeType.FILE)
    transcoder = MagicMock()
    progress = MagicMock()

    out = serialize_tree(node, transcoder, progress)

    assert out["type"] == "file"
    transcoder.transcode.assert_not_called()
    progress.assert_not_called()


def test_memory_error_aborts_export(tree) -> None:
    transcoder = MagicMock()
    transcoder.transcode.side_effect = MemoryError()

    with pytest.raises(SnapshotExportError) as exc:
        build_snapshot(tree.root, transcoder=transcoder)
    assert "fewer folders" in str(exc.value)


def test_progress_callback_failure_maps_to_export_error(tree) -> None:
    def _broken_progress() -> None:
        raise KeyError("ui gone")

    with pytest.raises(SnapshotExportError) as exc:
        export_snapshot(tree.root, on_progress=_broken_progress, transcoder=_fake_transcoder([]))
    assert isinstance(exc.value.__cause__, KeyError)
    assert "fewer folders" in str(exc.value)


def test_export_snapshot_returns_compact_json(tree) -> None:
    text = export_snapshot(tree.root, transcoder=_fake_transcoder([]))

    assert "\n" not in text
    doc = json.loads(text)
    assert doc["children"][0]["name"] == "photos"


def test_encode_snapshot_pretty() -> None:
    doc = {"id": "root", "name": "Root", "path": "", "type": "folder", "children": [], "isDeleted": False}
    assert "\n" in encode_snapshot(doc, pretty=True)
    assert json.loads(encode_snapshot(doc)) == doc
