from __future__ import annotations

"""
Integration tests for the Snapshot Codec.

Runs real ingestion, Pillow transcoding, JSON encoding and deserialization
together and checks the lossy round-trip contract plus the reference
scenario end to end.
"""

import io
import json
from typing import Iterator, List, Tuple
from unittest.mock import patch

from PIL import Image

from gallerysnap.core.imaging import transcoder as transcoder_module
from gallerysnap.core.imaging.data_url import decode_data_url
from gallerysnap.core.ingestion.builder import build_tree
from gallerysnap.core.resources import ResourceRegistry
from gallerysnap.core.snapshot.deserializer import import_snapshot
from gallerysnap.core.snapshot.serializer import export_snapshot
from gallerysnap.domain.tree_models import Node

from conftest import make_entry, make_image_bytes


def _shape(node: Node) -> Iterator[Tuple[str, str, str, str, bool]]:
    for n in node.iter_preorder():
        yield n.id, n.name, n.path, n.type.value, n.is_deleted


def _size_of(data_url: str) -> Tuple[int, int]:
    raw, _ = decode_data_url(data_url)
    with Image.open(io.BytesIO(raw)) as img:
        return img.size


def test_round_trip_preserves_structure(registry: ResourceRegistry) -> None:
    data = make_image_bytes((16, 12))
    entries = [
        make_entry(p, data)
        for p in ("trip/day1/a.png", "trip/day1/b.png", "trip/c.png", "misc/d.png", "e.png")
    ]
    built = build_tree(entries, registry)
    built.all_images[1].is_deleted = True

    restored = import_snapshot(export_snapshot(built.root), ResourceRegistry())

    assert list(_shape(restored.root)) == list(_shape(built.root))
    assert [n.path for n in restored.all_images] == [n.path for n in built.all_images]
    for original, copy in zip(built.all_images, restored.all_images):
        assert copy.resource is not None
        # Originals are PNG; the restored bytes are the re-encoded JPEG
        assert copy.source.read() != original.source.read()
        assert copy.source.media_type == "image/jpeg"


def test_reference_scenario(scenario_entries, registry: ResourceRegistry) -> None:
    built = build_tree(scenario_entries, registry)
    progress: List[int] = []

    text = export_snapshot(built.root, on_progress=lambda: progress.append(len(progress) + 1))
    doc = json.loads(text)

    assert progress == [1, 2]
    photos = doc["children"][0]
    a, sub = photos["children"]
    assert (photos["name"], photos["path"]) == ("photos", "photos")
    assert sub["path"] == "photos/sub"
    # Short edge 1000 and 500 are already within the target
    assert _size_of(a["thumbnailData"]) == (2000, 1000)
    assert _size_of(sub["children"][0]["thumbnailData"]) == (500, 500)


def test_failure_isolation(scenario_entries, registry: ResourceRegistry) -> None:
    built = build_tree(scenario_entries, registry)
    real_encode = transcoder_module.encode_jpeg
    calls: List[int] = []

    def _flaky(raw, *args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise OSError("encoder crashed")
        return real_encode(raw, *args, **kwargs)

    with patch.object(transcoder_module, "encode_jpeg", side_effect=_flaky):
        doc = json.loads(export_snapshot(built.root))

    a, sub = doc["children"][0]["children"]
    assert "thumbnailData" not in a
    assert sub["children"][0]["thumbnailData"].startswith("data:image/jpeg;base64,")

    restored = import_snapshot(json.dumps(doc), ResourceRegistry())
    assert [n.name for n in restored.all_images] == ["b.png"]
    restored_a = restored.root.children[0].children[0]
    assert restored_a.name == "a.png" and restored_a.resource is None


def test_large_image_downscaled(registry: ResourceRegistry) -> None:
    built = build_tree([make_entry("big/x.png", make_image_bytes((3000, 2000)))], registry)
    doc = json.loads(export_snapshot(built.root))

    x = doc["children"][0]["children"][0]
    assert _size_of(x["thumbnailData"]) == (1536, 1024)
