from __future__ import annotations

"""
Unit tests for the Gallery Tree Store.

Verifies:
1. Replacing or resetting a tree releases the previous handles exactly once.
2. Soft-delete mutations notify observers and are idempotent when toggled twice.
3. Detaching a subtree releases only that subtree.
"""

from typing import List, Tuple

import pytest

from gallerysnap.core.ingestion.builder import build_tree
from gallerysnap.core.store import TreeStore
from gallerysnap.domain.tree_models import Node


@pytest.fixture
def store(registry) -> TreeStore:
    return TreeStore(registry)


@pytest.fixture
def loaded_store(store: TreeStore, scenario_entries) -> TreeStore:
    result = build_tree(scenario_entries, store.registry)
    store.replace(result.root, result.all_images)
    return store


def test_empty_store() -> None:
    store = TreeStore()
    assert store.is_empty
    assert store.root is None
    assert store.all_images == []


def test_replace_releases_previous_tree(loaded_store: TreeStore, scenario_entries) -> None:
    old_resources = [n.resource for n in loaded_store.all_images]

    fresh = build_tree(scenario_entries, loaded_store.registry)
    loaded_store.replace(fresh.root, fresh.all_images)

    assert all(r.released for r in old_resources)
    assert all(not n.resource.released for n in loaded_store.all_images)
    assert len(loaded_store.registry) == 2


def test_reset_releases_everything(loaded_store: TreeStore) -> None:
    resources = [n.resource for n in loaded_store.all_images]

    loaded_store.reset()

    assert loaded_store.is_empty
    assert all(r.released for r in resources)
    assert len(loaded_store.registry) == 0
    # A second reset is a no-op
    loaded_store.reset()


def test_toggle_deleted_twice_restores_value(loaded_store: TreeStore) -> None:
    a, b = loaded_store.all_images

    assert loaded_store.toggle_deleted(a) is True
    assert loaded_store.toggle_deleted(a) is False
    assert a.is_deleted is False
    assert b.is_deleted is False


def test_observers_notified_on_change_only(loaded_store: TreeStore) -> None:
    events: List[Tuple[Node, bool]] = []
    unsubscribe = loaded_store.subscribe(lambda node, flag: events.append((node, flag)))
    a = loaded_store.all_images[0]

    assert loaded_store.set_deleted(a, True) is True
    assert loaded_store.set_deleted(a, True) is False
    loaded_store.toggle_deleted(a)

    assert events == [(a, True), (a, False)]

    unsubscribe()
    loaded_store.toggle_deleted(a)
    assert len(events) == 2


def test_soft_delete_rejects_folders(loaded_store: TreeStore) -> None:
    photos = loaded_store.root.children[0]
    with pytest.raises(ValueError):
        loaded_store.toggle_deleted(photos)


def test_detach_releases_subtree_only(loaded_store: TreeStore) -> None:
    a, b = loaded_store.all_images
    sub = loaded_store.root.children[0].find_folder("sub")

    assert loaded_store.detach(sub) == 1
    assert b.resource.released
    assert not a.resource.released
    assert loaded_store.all_images == [a]

    with pytest.raises(ValueError):
        loaded_store.detach(loaded_store.root)
