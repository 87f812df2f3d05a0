from __future__ import annotations

"""
Snapshot Deserializer.

Rebuilds a live gallery tree from a snapshot document. Embedded images are
decoded into fresh resource handles and in-memory sources; the original
pre-transcode bytes are not recoverable. Any malformed input fails the whole
import and releases the handles created so far.
"""

import json
import logging
from typing import Any, List, Optional, Union

from gallerysnap.core.imaging.data_url import decode_data_url
from gallerysnap.core.resources import ResourceRegistry
from gallerysnap.domain.errors import InvalidSnapshotError
from gallerysnap.domain.snapshot_models import ImportResult
from gallerysnap.domain.tree_models import BytesSource, Node, NodeType
from gallerysnap.utils.i18n import i18n

logger = logging.getLogger(__name__)

_REQUIRED_STR_FIELDS = ("id", "name", "path")
_NODE_TYPES = {t.value: t for t in NodeType}

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def deserialize_tree(
        data: Any,
        accumulator: List[Node],
        registry: ResourceRegistry,
        parent: Optional[Node] = None,
) -> Node:
    """
    Reconstruct one serialized node and its subtree.

    The new node is linked under ``parent`` before its children are restored.
    File nodes with a non-empty ``thumbnailData`` receive a resource handle
    and a :class:`BytesSource` and are appended to ``accumulator``; file
    nodes without one stay in the tree but are not accumulated.

    Args:
        data: Decoded JSON object of the node.
        accumulator: Flat list receiving viewable file nodes in order.
        registry: Registry that will own the created handles.
        parent: Already restored parent node.

    Returns:
        Node: The restored node.

    Raises:
        InvalidSnapshotError: On any shape violation.
    """
    node_type = _validate_node(data)

    node = Node(
        id=data["id"],
        name=data["name"],
        path=data["path"],
        type=node_type,
        is_deleted=bool(data.get("isDeleted") or False),
    )
    if parent is not None:
        parent.append_child(node)

    thumbnail = data.get("thumbnailData")
    if node.is_file and thumbnail:
        try:
            raw, media_type = decode_data_url(thumbnail)
        except ValueError as e:
            raise InvalidSnapshotError(f"Bad image payload in '{node.path}': {e}") from e
        node.source = BytesSource(raw, node.name, media_type)
        node.resource = registry.create(node.source, media_type)
        accumulator.append(node)

    for child in data.get("children") or []:
        deserialize_tree(child, accumulator, registry, node)

    return node


def import_snapshot(text: Union[str, bytes], registry: ResourceRegistry) -> ImportResult:
    """
    Parse a snapshot document into a live tree.

    Args:
        text: Raw snapshot document (UTF-8 bytes or str).
        registry: Registry that will own the created handles.

    Returns:
        ImportResult: Restored root and flat list of viewable file nodes.

    Raises:
        InvalidSnapshotError: With the user-facing message; no handle created
                              by a failed import survives.
    """
    accumulator: List[Node] = []
    try:
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8-sig")
        data = json.loads(text)

        if not isinstance(data, dict) or data.get("type") != NodeType.FOLDER.value:
            raise InvalidSnapshotError("Snapshot root must be a folder object.")
        if data.get("path") != "":
            raise InvalidSnapshotError(f"Snapshot root path must be empty, found {data.get('path')!r}.")

        root = deserialize_tree(data, accumulator, registry)

    except (InvalidSnapshotError, ValueError, TypeError, RecursionError) as e:
        registry.release_many(n.resource for n in accumulator)
        logger.error(f"Snapshot import rejected: {e}")
        raise InvalidSnapshotError(i18n.t("errors.invalid_snapshot")) from e

    logger.info(f"Snapshot imported: {len(accumulator)} viewable images.")
    return ImportResult(root=root, all_images=accumulator)

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _validate_node(data: Any) -> NodeType:
    """Check the structural contract of one serialized node."""
    if not isinstance(data, dict):
        raise InvalidSnapshotError(f"Expected an object, found {type(data).__name__}.")

    for key in _REQUIRED_STR_FIELDS:
        if not isinstance(data.get(key), str):
            raise InvalidSnapshotError(f"Field '{key}' must be a string.")

    raw_type = data.get("type")
    node_type = _NODE_TYPES.get(raw_type) if isinstance(raw_type, str) else None
    if node_type is None:
        raise InvalidSnapshotError(f"Unknown node type: {raw_type!r}.")

    children = data.get("children")
    if children is not None and not isinstance(children, list):
        raise InvalidSnapshotError(f"'children' of '{data['path']}' must be a list.")
    if node_type is NodeType.FILE and children:
        raise InvalidSnapshotError(f"File node '{data['path']}' cannot have children.")

    is_deleted = data.get("isDeleted")
    if is_deleted is not None and not isinstance(is_deleted, bool):
        raise InvalidSnapshotError(f"'isDeleted' of '{data['path']}' must be a boolean.")

    thumbnail = data.get("thumbnailData")
    if thumbnail is not None and not isinstance(thumbnail, str):
        raise InvalidSnapshotError(f"'thumbnailData' of '{data['path']}' must be a string.")

    return node_type
