from __future__ import annotations

"""
Gallery Tree Data Models.

Provides the node abstraction (file/folder variant) used by the ingestion
builder and the snapshot codec, the raw-bytes sources attached to file
nodes, the displayable-resource handle and the JSON-compatible serialized
node shape.

Ownership runs strictly downwards: a folder owns its children through the
``children`` list, while each child only keeps a weak reference to its
parent for navigation.
"""

import os
import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, TypedDict

from gallerysnap.domain.constants import PATH_SEPARATOR, ROOT_ID, ROOT_NAME
from gallerysnap.domain.errors import ResourceReleasedError

# -----------------------------------------------------------------------------
# RAW BYTES SOURCES
# -----------------------------------------------------------------------------

class FileSource:
    """
    Opaque handle over the binary content of a file node.

    Attributes:
        name: Base file name.
        media_type: MIME label (e.g. 'image/png').
    """

    def __init__(self, name: str, media_type: str):
        self.name = name
        self.media_type = media_type

    @property
    def size(self) -> int:
        raise NotImplementedError

    def read(self) -> bytes:
        """Return the full content. Raises OSError when unreadable."""
        raise NotImplementedError


class PathSource(FileSource):
    """Source backed by a file on disk, read on demand."""

    def __init__(self, file_path: str, name: str, media_type: str):
        super().__init__(name, media_type)
        self.file_path = file_path

    @property
    def size(self) -> int:
        try:
            return os.path.getsize(self.file_path)
        except OSError:
            return 0

    def read(self) -> bytes:
        with open(self.file_path, "rb") as f:
            return f.read()

    def __repr__(self) -> str:
        return f"PathSource({self.file_path!r})"


class BytesSource(FileSource):
    """Source backed by an in-memory buffer (e.g. a decoded snapshot payload)."""

    def __init__(self, data: bytes, name: str, media_type: str):
        super().__init__(name, media_type)
        self._data = bytes(data)

    @property
    def size(self) -> int:
        return len(self._data)

    def read(self) -> bytes:
        return self._data

    def __repr__(self) -> str:
        return f"BytesSource({self.name!r}, {len(self._data)} bytes)"

# -----------------------------------------------------------------------------
# DISPLAYABLE RESOURCE HANDLE
# -----------------------------------------------------------------------------

class ImageResource:
    """
    Process-local reference that makes a file's bytes renderable.

    The handle points at the node's :class:`FileSource` and reads through it
    on demand; creating a handle never loads the image. Instances are created
    and released by :class:`gallerysnap.core.resources.ResourceRegistry`.
    Reading a released handle raises :class:`ResourceReleasedError`.
    """

    def __init__(self, handle: str, source: FileSource, media_type: str):
        self.handle = handle
        self.media_type = media_type
        self._source: Optional[FileSource] = source

    @property
    def size(self) -> int:
        return self._source.size if self._source is not None else 0

    @property
    def released(self) -> bool:
        return self._source is None

    def read(self) -> bytes:
        """Return the image bytes. Raises OSError when the source is unreadable."""
        if self._source is None:
            raise ResourceReleasedError(f"Resource {self.handle} has been released.")
        return self._source.read()

    def _drop(self) -> None:
        self._source = None

    def __repr__(self) -> str:
        state = "released" if self.released else repr(self._source)
        return f"ImageResource({self.handle!r}, {state})"

# -----------------------------------------------------------------------------
# TREE NODES
# -----------------------------------------------------------------------------

class NodeType(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass(eq=False)
class Node:
    """
    One entry of the in-memory gallery tree.

    Attributes:
        id: Unique identifier, built as parent path + '/' + name.
        name: Last path component.
        path: Full relative path from the root ('' for the root).
        type: File or folder variant.
        children: Ordered child nodes (always empty for files).
        is_deleted: Soft-delete marker (files only).
        source: Raw-bytes source (files only).
        resource: Displayable-resource handle (files only).
    """
    id: str
    name: str
    path: str
    type: NodeType
    children: List["Node"] = field(default_factory=list)
    is_deleted: bool = False
    source: Optional[FileSource] = None
    resource: Optional[ImageResource] = None
    _parent_ref: Optional["weakref.ReferenceType[Node]"] = field(
        default=None, repr=False, compare=False
    )

    @property
    def parent(self) -> Optional[Node]:
        """Non-owning back reference to the containing folder."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_file(self) -> bool:
        return self.type is NodeType.FILE

    @property
    def is_folder(self) -> bool:
        return self.type is NodeType.FOLDER

    def append_child(self, child: Node) -> Node:
        """Take ownership of ``child`` and point its back reference here."""
        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        return child

    def remove_child(self, child: Node) -> None:
        """Give up ownership of ``child``. Raises ValueError if absent."""
        for i, existing in enumerate(self.children):
            if existing is child:
                del self.children[i]
                child._parent_ref = None
                return
        raise ValueError(f"{child.id!r} is not a child of {self.id!r}")

    def find_folder(self, name: str) -> Optional[Node]:
        for child in self.children:
            if child.is_folder and child.name == name:
                return child
        return None

    def iter_preorder(self) -> Iterator[Node]:
        yield self
        for child in self.children:
            yield from child.iter_preorder()

    def iter_postorder(self) -> Iterator[Node]:
        for child in self.children:
            yield from child.iter_postorder()
        yield self


def create_root() -> Node:
    """Create the single root folder of a new tree."""
    return Node(id=ROOT_ID, name=ROOT_NAME, path="", type=NodeType.FOLDER)


def child_id(parent: Node, name: str) -> str:
    return f"{parent.path}{PATH_SEPARATOR}{name}"


def child_path(parent: Node, name: str) -> str:
    return f"{parent.path}{PATH_SEPARATOR}{name}" if parent.path else name

# -----------------------------------------------------------------------------
# SERIALIZED SHAPE
# -----------------------------------------------------------------------------

class _SerializedNodeBase(TypedDict):
    id: str
    name: str
    path: str
    type: str
    children: List["SerializedNode"]


class SerializedNode(_SerializedNodeBase, total=False):
    """JSON-compatible mirror of :class:`Node` used in snapshot documents."""
    isDeleted: bool
    thumbnailData: str
