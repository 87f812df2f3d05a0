from __future__ import annotations

"""
Unit tests for the Displayable Resource Registry.

Verifies handle allocation, exactly-once release semantics and post-order
release of a whole tree.
"""

from unittest.mock import MagicMock

from gallerysnap.core.resources import HANDLE_SCHEME, ResourceRegistry
from gallerysnap.domain.tree_models import BytesSource, Node, NodeType, create_root


def _src(data: bytes = b"x") -> BytesSource:
    return BytesSource(data, "x.png", "image/png")


def test_create_allocates_unique_handles(registry: ResourceRegistry) -> None:
    a = registry.create(_src(b"a"), "image/png")
    b = registry.create(_src(b"b"), "image/png")

    assert a.handle != b.handle
    assert a.handle.startswith(HANDLE_SCHEME)
    assert len(registry) == 2
    assert a in registry


def test_release_is_exactly_once(registry: ResourceRegistry) -> None:
    res = registry.create(_src(b"a"), "image/png")

    assert registry.release(res) is True
    assert res.released
    assert res not in registry
    assert registry.release(res) is False
    assert registry.release(None) is False


def test_release_ignores_foreign_handles(registry: ResourceRegistry) -> None:
    other = ResourceRegistry()
    foreign = other.create(_src(), "image/png")

    assert registry.release(foreign) is False
    assert not foreign.released
    other.release_all()


def test_release_tree_releases_every_file(registry: ResourceRegistry) -> None:
    root = create_root()
    folder = root.append_child(Node(id="/f", name="f", path="f", type=NodeType.FOLDER))
    resources = []
    for name in ("1.png", "2.png"):
        node = folder.append_child(Node(id=f"f/{name}", name=name, path=f"f/{name}", type=NodeType.FILE))
        node.resource = registry.create(_src(b"x"), "image/png")
        resources.append(node.resource)
    # A file without a handle is simply skipped
    folder.append_child(Node(id="f/3.png", name="3.png", path="f/3.png", type=NodeType.FILE))

    assert registry.release_tree(root) == 2
    assert all(r.released for r in resources)
    assert len(registry) == 0
    assert registry.release_tree(root) == 0


def test_release_all(registry: ResourceRegistry) -> None:
    res = [registry.create(_src(b"x"), "image/png") for _ in range(3)]
    assert registry.release_all() == 3
    assert all(r.released for r in res)
    assert registry.release_many(res) == 0


def test_create_does_not_read_source(registry: ResourceRegistry) -> None:
    source = MagicMock()
    source.size = 2048

    res = registry.create(source, "image/png")

    source.read.assert_not_called()
    assert res.size == 2048
    registry.release(res)
    assert res.size == 0
