from __future__ import annotations

"""
Gallery Tree Store.

Holds the single active tree of a workspace together with its flat image
list, and is the only place where the tree is replaced, reset or mutated.
Replacing a tree releases every handle owned by the previous one exactly
once. Soft-delete changes are pushed to registered observers since they do
not alter tree identity or structure.
"""

import logging
import threading
from typing import Callable, List, Optional

from gallerysnap.core.resources import ResourceRegistry
from gallerysnap.domain.tree_models import Node

logger = logging.getLogger(__name__)

DeleteObserver = Callable[[Node, bool], None]


class TreeStore:
    """
    Owner of the active gallery tree.

    Attributes:
        registry: Resource registry owning every handle of the active tree.
    """

    def __init__(self, registry: Optional[ResourceRegistry] = None):
        self.registry = registry or ResourceRegistry()
        self._root: Optional[Node] = None
        self._all_images: List[Node] = []
        self._observers: List[DeleteObserver] = []
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def root(self) -> Optional[Node]:
        return self._root

    @property
    def all_images(self) -> List[Node]:
        return list(self._all_images)

    @property
    def is_empty(self) -> bool:
        return self._root is None

    # -------------------------------------------------------------------------
    # Tree lifecycle
    # -------------------------------------------------------------------------

    def replace(self, root: Node, all_images: List[Node]) -> None:
        """
        Install a new tree and release every handle of the previous one.

        The new tree is installed first so no reader can observe a tree whose
        handles are already released.
        """
        with self._lock:
            previous = self._root
            self._root = root
            self._all_images = list(all_images)

        if previous is not None and previous is not root:
            released = self.registry.release_tree(previous)
            logger.debug(f"Previous tree discarded; {released} handles released.")

    def reset(self) -> None:
        """Discard the active tree and release all of its handles."""
        with self._lock:
            previous = self._root
            self._root = None
            self._all_images = []

        if previous is not None:
            released = self.registry.release_tree(previous)
            logger.info(f"Workspace cleared; {released} handles released.")

    def detach(self, node: Node) -> int:
        """
        Remove ``node`` (and its subtree) from the active tree.

        Returns:
            int: Number of resource handles released.
        """
        with self._lock:
            parent = node.parent
            if parent is None:
                raise ValueError("The root node cannot be detached; use reset().")
            parent.remove_child(node)
            removed = {id(n) for n in node.iter_preorder()}
            self._all_images = [n for n in self._all_images if id(n) not in removed]

        return self.registry.release_tree(node)

    # -------------------------------------------------------------------------
    # Soft delete
    # -------------------------------------------------------------------------

    def subscribe(self, observer: DeleteObserver) -> Callable[[], None]:
        """
        Register ``observer`` for soft-delete changes.

        Returns:
            Callable[[], None]: Function that unregisters the observer.
        """
        with self._lock:
            self._observers.append(observer)

        def _unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _unsubscribe

    def set_deleted(self, node: Node, deleted: bool) -> bool:
        """
        Set the soft-delete flag of a file node.

        Observers are notified only when the flag actually changes.

        Returns:
            bool: True if the flag changed.
        """
        if not node.is_file:
            raise ValueError(f"Only file nodes can be soft-deleted: {node.id!r}")

        with self._lock:
            if node.is_deleted == deleted:
                return False
            node.is_deleted = deleted
            observers = list(self._observers)

        for observer in observers:
            observer(node, deleted)
        return True

    def toggle_deleted(self, node: Node) -> bool:
        """Flip the soft-delete flag of ``node`` and return its new value."""
        self.set_deleted(node, not node.is_deleted)
        return node.is_deleted
