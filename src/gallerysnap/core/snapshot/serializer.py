from __future__ import annotations

"""
Snapshot Serializer.

Walks a live gallery tree depth-first and produces its JSON-compatible
mirror, embedding a transcoded copy of every file node. Files are transcoded
strictly one after another; the progress callback fires once per file, in
discovery order.
"""

import json
import logging
from typing import Callable, Optional

from gallerysnap.core.imaging.transcoder import ImageTranscoder
from gallerysnap.domain.errors import SnapshotExportError
from gallerysnap.domain.tree_models import Node, SerializedNode
from gallerysnap.utils.i18n import i18n

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[], None]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def serialize_tree(
        node: Node,
        transcoder: ImageTranscoder,
        on_progress: Optional[ProgressCallback] = None,
) -> SerializedNode:
    """
    Serialize ``node`` and its subtree.

    A file node with a source is transcoded first and gains ``thumbnailData``
    when the payload is non-empty; then children are serialized in their
    stored order. A failing file never aborts its siblings. MemoryError
    propagates and aborts the whole walk.

    Args:
        node: Subtree root.
        transcoder: Single-worker transcoder used for every file.
        on_progress: Called with no arguments after each file transcode.

    Returns:
        SerializedNode: The JSON-compatible subtree.
    """
    serialized: SerializedNode = {
        "id": node.id,
        "name": node.name,
        "path": node.path,
        "type": node.type.value,
        "children": [],
        "isDeleted": bool(node.is_deleted),
    }

    if node.is_file and node.source is not None:
        payload = _transcode_file(node, transcoder)
        if payload:
            serialized["thumbnailData"] = payload
        if on_progress:
            on_progress()

    for child in node.children:
        serialized["children"].append(serialize_tree(child, transcoder, on_progress))

    return serialized


def build_snapshot(
        root: Node,
        on_progress: Optional[ProgressCallback] = None,
        transcoder: Optional[ImageTranscoder] = None,
) -> SerializedNode:
    """
    Serialize ``root`` with tree-level failures mapped to SnapshotExportError.

    Args:
        root: Root of the live tree.
        on_progress: Per-file progress callback.
        transcoder: Transcoder to use; a default one is created (and closed)
                    when omitted.

    Raises:
        SnapshotExportError: The walk failed as a whole (e.g. memory
                             exhaustion). No partial tree is returned.
    """
    owns_transcoder = transcoder is None
    active = transcoder or ImageTranscoder()

    try:
        return serialize_tree(root, active, on_progress)
    except MemoryError as e:
        logger.error("Export failed: memory exhausted while building the snapshot.")
        raise SnapshotExportError(i18n.t("errors.export_failed")) from e
    except Exception as e:
        logger.error(f"Export failed: {e}", exc_info=True)
        raise SnapshotExportError(i18n.t("errors.export_failed")) from e
    finally:
        if owns_transcoder:
            active.close()


def encode_snapshot(serialized: SerializedNode, pretty: bool = False) -> str:
    """Encode a serialized tree as the snapshot JSON text."""
    try:
        if pretty:
            return json.dumps(serialized, ensure_ascii=False, indent=2)
        return json.dumps(serialized, ensure_ascii=False, separators=(",", ":"))
    except MemoryError as e:
        logger.error("Export failed: memory exhausted while encoding the snapshot.")
        raise SnapshotExportError(i18n.t("errors.export_failed")) from e


def export_snapshot(
        root: Node,
        on_progress: Optional[ProgressCallback] = None,
        transcoder: Optional[ImageTranscoder] = None,
        pretty: bool = False,
) -> str:
    """
    Produce the snapshot document for ``root``.

    Raises:
        SnapshotExportError: On any tree-level failure; no partial document
                             is returned.
    """
    return encode_snapshot(build_snapshot(root, on_progress, transcoder), pretty)


def count_encoded(serialized: SerializedNode) -> int:
    """Count file nodes of a serialized tree that carry an embedded image."""
    own = 1 if serialized.get("thumbnailData") else 0
    return own + sum(count_encoded(child) for child in serialized.get("children", []))

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _transcode_file(node: Node, transcoder: ImageTranscoder) -> str:
    """Run one transcode, converting any per-file exception into an empty payload."""
    try:
        return transcoder.transcode(node.source)
    except MemoryError:
        raise
    except Exception as e:
        logger.error(f"Error processing file {node.name}: {e}")
        return ""
