from __future__ import annotations

"""
Snapshot Domain Data Models.

Defines the result objects exchanged between the ingestion builder, the
snapshot codec, the export/import engine and the interface layers (CLI and
background tasks).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gallerysnap.domain.tree_models import FileSource, Node

# -----------------------------------------------------------------------------
# INPUT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileEntry:
    """
    One candidate file handed to the ingestion builder.

    Attributes:
        rel_path: Folder-separated relative path ('photos/sub/b.png').
        source: Raw-bytes source for the file content.
        media_type: MIME label used to reject non-image entries.
    """
    rel_path: str
    source: FileSource
    media_type: str

# -----------------------------------------------------------------------------
# TREE BUILD RESULTS
# -----------------------------------------------------------------------------

@dataclass
class IngestionResult:
    """
    Output of the ingestion builder.

    Attributes:
        root: Root folder of the new tree.
        all_images: Flat list of file nodes in discovery order.
        skipped: Number of entries rejected as hidden or non-image.
        total_bytes: Sum of the accepted sources' sizes.
    """
    root: Node
    all_images: List[Node] = field(default_factory=list)
    skipped: int = 0
    total_bytes: int = 0


@dataclass
class ImportResult:
    """
    Output of the snapshot deserializer.

    Attributes:
        root: Reconstructed root folder.
        all_images: File nodes that carry a viewable resource, in order.
    """
    root: Node
    all_images: List[Node] = field(default_factory=list)


@dataclass(frozen=True)
class GalleryStats:
    total_files: int = 0
    total_folders: int = 0
    total_size: int = 0

# -----------------------------------------------------------------------------
# ENGINE RESULT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SnapshotResult:
    """
    Unified result of an export or import run.

    Attributes:
        ok: Flag indicating success or failure.
        error: User-facing message in case of failure.
        operation: 'export' or 'import'.
        snapshot_path: Snapshot file written or read.
        input_path: Source directory (export only).
        files_total: File nodes found in the tree.
        files_encoded: File nodes that produced an embedded image.
        bytes_written: Size of the snapshot document (export only).
        stats: Gallery statistics of the resulting tree.
        tree_lines: ASCII rendering of the tree.
        summary: Additional execution metadata.
    """
    ok: bool
    error: str
    operation: str
    snapshot_path: str = ""
    input_path: str = ""
    files_total: int = 0
    files_encoded: int = 0
    bytes_written: int = 0
    stats: GalleryStats = field(default_factory=GalleryStats)
    tree_lines: List[str] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        operation: str,
        snapshot_path: str = "",
        input_path: str = "",
        summary_extra: Optional[Dict[str, Any]] = None
) -> SnapshotResult:
    """
    Create a failed snapshot result instance.

    Args:
        error: User-facing error description.
        operation: Name of the failed operation.
        snapshot_path: Target or source snapshot file.
        input_path: Source directory, if any.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        SnapshotResult: An immutable error result object.
    """
    return SnapshotResult(
        ok=False,
        error=error,
        operation=operation,
        snapshot_path=snapshot_path,
        input_path=input_path,
        summary=summary_extra or {},
    )


def create_success_result(
        operation: str,
        snapshot_path: str,
        input_path: str = "",
        files_total: int = 0,
        files_encoded: int = 0,
        bytes_written: int = 0,
        stats: Optional[GalleryStats] = None,
        tree_lines: Optional[List[str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None
) -> SnapshotResult:
    """Create a successful snapshot result instance."""
    return SnapshotResult(
        ok=True,
        error="",
        operation=operation,
        snapshot_path=snapshot_path,
        input_path=input_path,
        files_total=files_total,
        files_encoded=files_encoded,
        bytes_written=bytes_written,
        stats=stats or GalleryStats(),
        tree_lines=tree_lines or [],
        summary=summary_extra or {},
    )
