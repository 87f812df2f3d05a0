from __future__ import annotations

"""
Displayable Resource Registry.

Creates and releases the process-local handles that make image bytes
renderable. Every handle belongs to exactly one registry; releasing it drops
its source reference and marks it dead so later reads fail loudly instead of
showing stale content.
"""

import logging
import threading
import uuid
from typing import Dict, Iterable, Optional

from gallerysnap.domain.tree_models import FileSource, ImageResource, Node

logger = logging.getLogger(__name__)

HANDLE_SCHEME = "blob:gallerysnap/"


class ResourceRegistry:
    """
    Owner of all live :class:`ImageResource` handles of a workspace.

    Thread-safe: ingestion may run on a background task while the caller
    inspects the registry from another thread.
    """

    def __init__(self) -> None:
        self._live: Dict[str, ImageResource] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._live)

    def __contains__(self, resource: object) -> bool:
        if not isinstance(resource, ImageResource):
            return False
        with self._lock:
            return self._live.get(resource.handle) is resource

    def create(self, source: FileSource, media_type: str) -> ImageResource:
        """Allocate a new handle over ``source`` without reading it."""
        handle = f"{HANDLE_SCHEME}{uuid.uuid4()}"
        resource = ImageResource(handle, source, media_type)
        with self._lock:
            self._live[handle] = resource
        return resource

    def release(self, resource: Optional[ImageResource]) -> bool:
        """
        Release ``resource`` if it is still live in this registry.

        Returns:
            bool: True when the handle was released by this call, False if it
                  was already released or belongs elsewhere.
        """
        if resource is None:
            return False
        with self._lock:
            if self._live.get(resource.handle) is not resource:
                return False
            del self._live[resource.handle]
        resource._drop()
        return True

    def release_many(self, resources: Iterable[Optional[ImageResource]]) -> int:
        return sum(1 for r in resources if self.release(r))

    def release_tree(self, root: Node) -> int:
        """Release every handle reachable from ``root``, children first."""
        released = 0
        for node in root.iter_postorder():
            if node.resource is not None and self.release(node.resource):
                released += 1
        return released

    def release_all(self) -> int:
        with self._lock:
            resources = list(self._live.values())
            self._live.clear()
        for resource in resources:
            resource._drop()
        if resources:
            logger.debug(f"Released {len(resources)} resource handles.")
        return len(resources)
