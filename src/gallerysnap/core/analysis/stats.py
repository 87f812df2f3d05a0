from __future__ import annotations

"""
Gallery Statistics and Navigation Helpers.

Small read-only views over a gallery tree: aggregate counters, human
readable sizes, the visible (non-deleted) file sequence used for
next/previous navigation, and percentage tracking for progress callbacks.
"""

import math
import threading
from typing import Iterable, List, Optional

from gallerysnap.domain.snapshot_models import GalleryStats
from gallerysnap.domain.tree_models import Node

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]

# -----------------------------------------------------------------------------
# STATISTICS
# -----------------------------------------------------------------------------

def count_folders(root: Node) -> int:
    """Count folders below ``root`` (the root itself excluded)."""
    return sum(1 for n in root.iter_preorder() if n.is_folder) - (1 if root.is_folder else 0)


def compute_stats(root: Node, all_images: List[Node], total_size: Optional[int] = None) -> GalleryStats:
    """
    Aggregate gallery counters.

    Args:
        root: Root of the tree.
        all_images: Flat list of viewable file nodes.
        total_size: Known byte total; summed from the image sources when omitted.
    """
    if total_size is None:
        total_size = sum(n.source.size for n in all_images if n.source is not None)
    return GalleryStats(
        total_files=len(all_images),
        total_folders=count_folders(root),
        total_size=total_size,
    )


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Format a byte count, e.g. 1536 -> '1.5 KB'."""
    if not num_bytes:
        return "0 Bytes"
    dm = max(decimals, 0)
    i = 0
    while num_bytes >= 1024 ** (i + 1) and i < len(_SIZE_UNITS) - 1:
        i += 1
    value = round(num_bytes / 1024 ** i, dm)
    text = f"{value:.{dm}f}".rstrip("0").rstrip(".") if dm else str(int(value))
    return f"{text} {_SIZE_UNITS[i]}"

# -----------------------------------------------------------------------------
# NAVIGATION
# -----------------------------------------------------------------------------

def visible_files(nodes: Iterable[Node]) -> List[Node]:
    """Keep file nodes that are not soft-deleted, in order."""
    return [n for n in nodes if n.is_file and not n.is_deleted]


def next_file(nodes: Iterable[Node], current: Node) -> Optional[Node]:
    """Visible file after ``current`` (matched by id), or None at the end."""
    visible = visible_files(nodes)
    idx = _index_of(visible, current)
    if idx != -1 and idx < len(visible) - 1:
        return visible[idx + 1]
    return None


def previous_file(nodes: Iterable[Node], current: Node) -> Optional[Node]:
    """Visible file before ``current`` (matched by id), or None at the start."""
    visible = visible_files(nodes)
    idx = _index_of(visible, current)
    if idx > 0:
        return visible[idx - 1]
    return None


def _index_of(nodes: List[Node], current: Node) -> int:
    for i, node in enumerate(nodes):
        if node.id == current.id:
            return i
    return -1

# -----------------------------------------------------------------------------
# PROGRESS
# -----------------------------------------------------------------------------

class ProgressTracker:
    """
    Counts no-argument progress callbacks against a known total.

    Instances are callable so they can be passed straight to the serializer.
    """

    def __init__(self, total: int, processed: int = 0):
        self.total = total
        self.processed = processed
        self._lock = threading.Lock()

    def __call__(self) -> None:
        with self._lock:
            self.processed += 1

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 100
        return int(math.floor(self.processed / self.total * 100 + 0.5))
