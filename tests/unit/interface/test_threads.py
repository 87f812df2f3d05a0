from __future__ import annotations

"""
Unit tests for the Background Worker Threads.

Verifies result marshalling through on_complete, cancellation handling and
exception capture without touching a real UI loop.
"""

import threading
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import MagicMock, patch

from gallerysnap.core.snapshot.engine import load_directory
from gallerysnap.core.store import TreeStore
from gallerysnap.domain.snapshot_models import SnapshotResult
from gallerysnap.interface.threads import (
    load_directory_task,
    run_export_task,
    run_import_task,
    start_task,
)


def test_start_task_runs_on_daemon_thread() -> None:
    done = threading.Event()
    thread = start_task(lambda flag: flag.set(), done)

    thread.join(5)
    assert thread.daemon
    assert done.is_set()


def test_load_directory_task(image_dir: Path) -> None:
    store = TreeStore()
    results: List[Any] = []

    load_directory_task(str(image_dir), store, results.append)

    assert isinstance(results[0], int) and results[0] > 0
    assert len(store.all_images) == 2
    store.reset()


def test_load_directory_task_reports_exception(tmp_path: Path) -> None:
    results: List[Any] = []
    load_directory_task(str(tmp_path / "missing"), TreeStore(), results.append)
    assert isinstance(results[0], NotADirectoryError)


def test_export_task_exports_active_tree(image_dir: Path, mock_config_dict: Dict[str, Any]) -> None:
    store = TreeStore()
    load_directory(str(image_dir), store)
    results: List[Any] = []
    progress = MagicMock()

    run_export_task(store, mock_config_dict, results.append, on_progress=progress)

    result = results[0]
    assert isinstance(result, SnapshotResult)
    assert result.ok, result.error
    assert progress.call_count == 2
    assert Path(mock_config_dict["output_path"]).exists()
    # The active tree stays usable after export
    assert all(not n.resource.released for n in store.all_images)
    store.reset()


def test_export_task_empty_store(mock_config_dict: Dict[str, Any]) -> None:
    results: List[Any] = []
    run_export_task(TreeStore(), mock_config_dict, results.append)
    assert results[0].ok is False


def test_export_task_cancelled_before_start(mock_config_dict: Dict[str, Any]) -> None:
    event = threading.Event()
    event.set()
    on_complete = MagicMock()

    run_export_task(TreeStore(), mock_config_dict, on_complete, cancellation_event=event)
    on_complete.assert_not_called()


def test_export_task_captures_exception(image_dir: Path, mock_config_dict: Dict[str, Any]) -> None:
    store = TreeStore()
    load_directory(str(image_dir), store)
    results: List[Any] = []

    with patch("gallerysnap.interface.threads.export_tree", side_effect=RuntimeError("boom")):
        run_export_task(store, mock_config_dict, results.append)

    assert isinstance(results[0], RuntimeError)
    store.reset()


def test_import_task_round_trip(image_dir: Path, mock_config_dict: Dict[str, Any]) -> None:
    source_store = TreeStore()
    load_directory(str(image_dir), source_store)
    run_export_task(source_store, mock_config_dict, lambda _: None)
    source_store.reset()

    store = TreeStore()
    results: List[Any] = []
    run_import_task(mock_config_dict["output_path"], store, results.append)

    assert results[0].ok
    assert [n.path for n in store.all_images] == ["photos/a.png", "photos/sub/b.jpg"]
    store.reset()


def test_import_task_cancelled_discards_result(mock_config_dict: Dict[str, Any]) -> None:
    event = threading.Event()
    event.set()
    on_complete = MagicMock()

    run_import_task(mock_config_dict["output_path"], TreeStore(), on_complete, event)
    on_complete.assert_not_called()
