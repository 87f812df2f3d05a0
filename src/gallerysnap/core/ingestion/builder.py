from __future__ import annotations

"""
Gallery Tree Builder.

Converts a flat collection of path-bearing file entries into the gallery
tree. Folder segments are resolved incrementally from the root and reused
when a folder of the same name already exists; file segments become leaf
nodes with an eagerly created displayable resource. Creating the resource
does not read the file; bytes are pulled from the source when needed.
"""

import logging
from typing import Iterable, List

from gallerysnap.core.resources import ResourceRegistry
from gallerysnap.domain.constants import (
    HIDDEN_FILE_MARKER,
    IMAGE_MEDIA_PREFIX,
    PATH_SEPARATOR,
)
from gallerysnap.domain.snapshot_models import FileEntry, IngestionResult
from gallerysnap.domain.tree_models import (
    Node,
    NodeType,
    child_id,
    child_path,
    create_root,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_tree(entries: Iterable[FileEntry], registry: ResourceRegistry) -> IngestionResult:
    """
    Build a gallery tree from ingestion entries.

    Hidden entries and entries whose media type is not an image are dropped
    before they reach the tree. Each accepted entry allocates one resource
    handle in ``registry``; the caller owns releasing them (see TreeStore).

    Args:
        entries: File entries in discovery order.
        registry: Registry that will own the created resource handles.

    Returns:
        IngestionResult: Root node, flat file list and ingestion counters.
    """
    root = create_root()
    result = IngestionResult(root=root)

    for entry in entries:
        segments = split_path(entry.rel_path)
        if not segments or not is_ingestible(segments[-1], entry.media_type):
            result.skipped += 1
            continue

        parent = _resolve_folder(root, segments[:-1])
        file_node = _create_file_node(parent, segments[-1], entry, registry)
        parent.append_child(file_node)
        result.all_images.append(file_node)
        result.total_bytes += entry.source.size

    logger.info(
        f"Tree built: {len(result.all_images)} images accepted, {result.skipped} entries skipped."
    )
    return result


def is_ingestible(file_name: str, media_type: str) -> bool:
    """Return True unless the file is hidden or not an image."""
    if file_name.startswith(HIDDEN_FILE_MARKER):
        return False
    return (media_type or "").startswith(IMAGE_MEDIA_PREFIX)


def split_path(rel_path: str) -> List[str]:
    """Split a relative path on '/' (or '\\'), dropping empty segments."""
    normalized = (rel_path or "").replace("\\", PATH_SEPARATOR)
    return [seg for seg in normalized.split(PATH_SEPARATOR) if seg]

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _resolve_folder(root: Node, folder_segments: List[str]) -> Node:
    """Walk (and create where missing) the folder chain below ``root``."""
    cursor = root
    for segment in folder_segments:
        existing = cursor.find_folder(segment)
        if existing is None:
            existing = cursor.append_child(Node(
                id=child_id(cursor, segment),
                name=segment,
                path=child_path(cursor, segment),
                type=NodeType.FOLDER,
            ))
        cursor = existing
    return cursor


def _create_file_node(
        parent: Node,
        name: str,
        entry: FileEntry,
        registry: ResourceRegistry
) -> Node:
    node = Node(
        id=child_id(parent, name),
        name=name,
        path=PATH_SEPARATOR.join(split_path(entry.rel_path)),
        type=NodeType.FILE,
        source=entry.source,
    )
    node.resource = registry.create(entry.source, entry.media_type)
    return node
