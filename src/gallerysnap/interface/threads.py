from __future__ import annotations

"""
Background Worker Threads for Interactive Hosts.

Runs directory loading, snapshot export and snapshot import off the
caller's interactive thread. Results (or the exception that aborted the
task) are marshalled back through ``on_complete``; the host is expected to
re-dispatch them onto its own UI loop.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from gallerysnap.core.snapshot.engine import (
    ProgressReporter,
    export_tree,
    load_directory,
    run_import,
)
from gallerysnap.core.store import TreeStore
from gallerysnap.core.validator import validate_config
from gallerysnap.domain.snapshot_models import create_error_result
from gallerysnap.infra.fs import default_snapshot_filename, normalize_path
from gallerysnap.utils.i18n import i18n

logger = logging.getLogger(__name__)


def start_task(target: Callable[..., None], *args: Any, **kwargs: Any) -> threading.Thread:
    """Launch ``target`` on a daemon thread and return it."""
    thread = threading.Thread(target=target, args=args, kwargs=kwargs, daemon=True)
    thread.start()
    return thread

# -----------------------------------------------------------------------------
# INGESTION WORKER
# -----------------------------------------------------------------------------

def load_directory_task(
        input_path: str,
        store: TreeStore,
        on_complete: Callable[[Any], None],
        include_hidden: bool = False,
) -> None:
    """
    Ingest ``input_path`` into ``store`` in the background.

    Args:
        input_path: Directory picked by the user.
        store: Store that receives the new tree.
        on_complete: Receives the accepted byte total, or the exception.
        include_hidden: Descend into hidden directories.
    """
    try:
        total_bytes = load_directory(input_path, store, include_hidden)
        on_complete(total_bytes)
    except Exception as e:
        logger.error(f"Load Task: Directory ingestion failed: {e}", exc_info=True)
        on_complete(e)

# -----------------------------------------------------------------------------
# SNAPSHOT WORKERS
# -----------------------------------------------------------------------------

def run_export_task(
        store: TreeStore,
        config: Dict[str, Any],
        on_complete: Callable[[Any], None],
        on_progress: Optional[ProgressReporter] = None,
        cancellation_event: Optional[threading.Event] = None,
) -> None:
    """
    Export the store's active tree in a dedicated background thread.

    Files are transcoded one at a time; ``on_progress`` receives
    (processed, total) after each of them. A cancellation requested while the
    walk runs does not stop it, but the result is discarded.

    Args:
        store: Store holding the tree to export.
        config: Session configuration (raw or partial).
        on_complete: Callback receiving the SnapshotResult or the exception.
        on_progress: Optional (processed, total) reporter.
        cancellation_event: Event flag used to discard the result.
    """
    try:
        if cancellation_event and cancellation_event.is_set():
            logger.info("Export Thread: Aborted by user before start.")
            return

        root = store.root
        if root is None:
            on_complete(create_error_result(i18n.t("errors.no_images", path=""), "export"))
            return

        cfg, _ = validate_config(config, strict=False)
        output_path = normalize_path(cfg["output_path"], default_snapshot_filename())

        result = export_tree(
            root,
            store.all_images,
            cfg,
            output_path,
            on_progress=on_progress,
        )

        if cancellation_event and cancellation_event.is_set():
            logger.info("Export Thread: Completed but result discarded due to cancellation.")
            return

        on_complete(result)

    except Exception as e:
        logger.critical(f"Export Thread: Critical failure detected: {e}", exc_info=True)
        on_complete(e)


def run_import_task(
        snapshot_path: str,
        store: TreeStore,
        on_complete: Callable[[Any], None],
        cancellation_event: Optional[threading.Event] = None,
) -> None:
    """
    Load a snapshot into ``store`` in a dedicated background thread.

    Args:
        snapshot_path: Path of the .afm/.json document.
        store: Store that receives the restored tree.
        on_complete: Callback receiving the SnapshotResult or the exception.
        cancellation_event: Event flag; a cancelled import leaves the store as is.
    """
    try:
        if cancellation_event and cancellation_event.is_set():
            logger.info("Import Thread: Aborted by user before start.")
            return

        result = run_import(snapshot_path, store, cancellation_event=cancellation_event)

        if cancellation_event and cancellation_event.is_set():
            logger.info("Import Thread: Result discarded due to cancellation.")
            return

        on_complete(result)

    except Exception as e:
        logger.critical(f"Import Thread: Critical failure detected: {e}", exc_info=True)
        on_complete(e)
