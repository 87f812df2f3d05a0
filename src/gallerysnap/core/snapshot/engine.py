from __future__ import annotations

"""
Snapshot Export/Import Engine.

Coordinates the full workflows behind the interface layers:

Export:
1. Validates configuration and paths.
2. Checks for an existing output file.
3. Scans the input directory and builds the gallery tree.
4. Serializes the tree, transcoding files one at a time.
5. Enforces the optional size limit and writes the document atomically.
6. Releases every resource handle of the temporary tree.

Steps 4-5 are also available for an already loaded tree (export_tree).

Import:
1. Reads the snapshot document.
2. Rebuilds the tree and installs it in the caller's store.
"""

import logging
import os
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from gallerysnap.core.analysis.stats import ProgressTracker, compute_stats
from gallerysnap.core.analysis.tree_renderer import render_tree
from gallerysnap.core.imaging.transcoder import ImageTranscoder
from gallerysnap.core.ingestion.builder import build_tree
from gallerysnap.core.ingestion.scanner import yield_image_entries
from gallerysnap.core.snapshot.deserializer import import_snapshot
from gallerysnap.core.snapshot.serializer import (
    build_snapshot,
    count_encoded,
    encode_snapshot,
)
from gallerysnap.core.store import TreeStore
from gallerysnap.core.validator import validate_config
from gallerysnap.domain.constants import SNAPSHOT_EXTENSIONS
from gallerysnap.domain.errors import InvalidSnapshotError, SnapshotExportError
from gallerysnap.domain.snapshot_models import (
    SnapshotResult,
    create_error_result,
    create_success_result,
)
from gallerysnap.domain.tree_models import Node
from gallerysnap.infra.fs import default_snapshot_filename, normalize_path, write_text_atomic
from gallerysnap.utils.i18n import i18n

logger = logging.getLogger(__name__)

# Receives (processed, total) after every transcoded file
ProgressReporter = Callable[[int, int], None]

_MB = 1024 * 1024

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def load_directory(input_path: str, store: TreeStore, include_hidden: bool = False) -> int:
    """
    Ingest ``input_path`` into ``store``, replacing (and releasing) its tree.

    Returns:
        int: Total bytes of the accepted images.
    """
    result = build_tree(yield_image_entries(input_path, include_hidden), store.registry)
    store.replace(result.root, result.all_images)
    return result.total_bytes


def write_snapshot(
        root: Node,
        output_path: str,
        transcoder: ImageTranscoder,
        total_files: int,
        on_progress: Optional[ProgressReporter] = None,
        pretty: bool = False,
        max_snapshot_mb: int = 0,
) -> Tuple[int, int]:
    """
    Serialize ``root`` and persist the document.

    Args:
        root: Root of the tree to export.
        output_path: Destination file.
        transcoder: Transcoder used for every file node.
        total_files: Number of file nodes, used for progress reporting.
        on_progress: Optional (processed, total) reporter.
        pretty: Indent the JSON output.
        max_snapshot_mb: Abort when the document exceeds this size (0 = off).

    Returns:
        Tuple[int, int]: (Bytes written, file nodes with an embedded image).

    Raises:
        SnapshotExportError: Export failed as a whole; nothing is written.
    """
    tracker = ProgressTracker(total_files)

    def _on_file_done() -> None:
        tracker()
        if on_progress:
            on_progress(tracker.processed, tracker.total)

    serialized = build_snapshot(root, _on_file_done, transcoder=transcoder)
    document = encode_snapshot(serialized, pretty)

    size = len(document.encode("utf-8"))
    if max_snapshot_mb and size > max_snapshot_mb * _MB:
        raise SnapshotExportError(i18n.t(
            "errors.snapshot_too_large",
            limit=max_snapshot_mb,
            size=round(size / _MB, 1),
        ))

    try:
        written = write_text_atomic(output_path, document)
    except OSError as e:
        raise SnapshotExportError(i18n.t("errors.write_failed", path=output_path, error=e)) from e

    return written, count_encoded(serialized)


def export_tree(
        root: Node,
        all_images: List[Node],
        cfg: Dict[str, Any],
        output_path: str,
        *,
        on_progress: Optional[ProgressReporter] = None,
        total_bytes: Optional[int] = None,
        input_path: str = "",
) -> SnapshotResult:
    """
    Export an already built tree to ``output_path``.

    Args:
        root: Root of the tree to export.
        all_images: Flat list of the tree's file nodes.
        cfg: Validated configuration.
        output_path: Destination file (overwritten if present).
        on_progress: Optional (processed, total) reporter.
        total_bytes: Known size of the original images, for statistics.
        input_path: Source directory, recorded in the result.

    Returns:
        SnapshotResult: Status, counters and the rendered tree.
    """
    files_total = sum(1 for n in root.iter_preorder() if n.is_file and n.source is not None)
    stats = compute_stats(root, all_images, total_bytes)
    tree_lines = render_tree(root)
    logger.info(f"Exporting {files_total} images from {stats.total_folders} folders.")

    try:
        with ImageTranscoder(cfg["short_edge_target"], cfg["jpeg_quality"]) as transcoder:
            written, encoded = write_snapshot(
                root,
                output_path,
                transcoder,
                total_files=files_total,
                on_progress=on_progress,
                pretty=cfg["pretty_json"],
                max_snapshot_mb=cfg["max_snapshot_mb"],
            )
    except SnapshotExportError as e:
        return create_error_result(str(e), "export", output_path, input_path)

    logger.info(f"Snapshot written to {output_path} ({written} bytes).")
    return create_success_result(
        "export",
        output_path,
        input_path=input_path,
        files_total=files_total,
        files_encoded=encoded,
        bytes_written=written,
        stats=stats,
        tree_lines=tree_lines,
        summary_extra={
            "short_edge_target": cfg["short_edge_target"],
            "jpeg_quality": cfg["jpeg_quality"],
            "failed": files_total - encoded,
        },
    )


def run_export(
        config: Optional[Dict[str, Any]],
        *,
        overwrite: bool = False,
        on_progress: Optional[ProgressReporter] = None,
) -> SnapshotResult:
    """
    Export a directory of images into a snapshot file.

    Args:
        config: The configuration dictionary (raw or partial).
        overwrite: If True, replace an existing output file.
        on_progress: Optional (processed, total) reporter.

    Returns:
        SnapshotResult: Status, counters and the rendered tree.
    """
    logger.info("Snapshot export started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    input_path = normalize_path(cfg["input_path"], os.getcwd())
    if not os.path.isdir(input_path):
        msg = i18n.t("errors.not_a_directory", path=input_path)
        logger.error(msg)
        return create_error_result(msg, "export", input_path=input_path)

    output_path = normalize_path(cfg["output_path"], default_snapshot_filename())
    if os.path.exists(output_path) and not overwrite:
        msg = i18n.t("errors.file_exists", path=output_path)
        logger.warning(msg)
        return create_error_result(msg, "export", output_path, input_path)

    # The temporary tree only lives for this export
    store = TreeStore()
    try:
        total_bytes = load_directory(input_path, store, cfg["include_hidden"])
        if store.root is None or not store.all_images:
            msg = i18n.t("errors.no_images", path=input_path)
            logger.error(msg)
            return create_error_result(msg, "export", output_path, input_path)

        return export_tree(
            store.root,
            store.all_images,
            cfg,
            output_path,
            on_progress=on_progress,
            total_bytes=total_bytes,
            input_path=input_path,
        )
    finally:
        store.reset()


def run_import(
        snapshot_path: str,
        store: TreeStore,
        cancellation_event: Optional[threading.Event] = None,
) -> SnapshotResult:
    """
    Load a snapshot file into ``store``.

    On failure (or cancellation) the store keeps its previous tree untouched
    and the handles created for the discarded tree are released.

    Args:
        snapshot_path: Path of the .afm/.json document.
        store: Store that receives the restored tree.
        cancellation_event: Checked once the document has been parsed.

    Returns:
        SnapshotResult: Status, counters and the rendered tree.
    """
    path = os.path.abspath(snapshot_path)
    if os.path.splitext(path)[1].lower() not in SNAPSHOT_EXTENSIONS:
        msg = i18n.t("errors.unsupported_snapshot", path=path, extensions=", ".join(SNAPSHOT_EXTENSIONS))
        logger.error(msg)
        return create_error_result(msg, "import", path)

    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        msg = i18n.t("errors.unreadable", path=path, error=e)
        logger.error(msg)
        return create_error_result(msg, "import", path)

    try:
        result = import_snapshot(raw, store.registry)
    except InvalidSnapshotError as e:
        return create_error_result(str(e), "import", path)

    if cancellation_event is not None and cancellation_event.is_set():
        store.registry.release_tree(result.root)
        logger.info("Snapshot import cancelled; restored tree discarded.")
        return create_error_result(i18n.t("cli.status.interrupted"), "import", path)

    store.replace(result.root, result.all_images)

    files_total = sum(1 for n in result.root.iter_preorder() if n.is_file)
    return create_success_result(
        "import",
        path,
        files_total=files_total,
        files_encoded=len(result.all_images),
        stats=compute_stats(result.root, result.all_images),
        tree_lines=render_tree(result.root),
    )
