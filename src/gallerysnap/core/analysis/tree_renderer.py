from __future__ import annotations

"""
Tree Renderer.

Converts a live gallery tree into a visual ASCII representation for the
CLI. Entries keep their stored (discovery) order; soft-deleted files and
files without a viewable image are annotated.
"""

from typing import List

from gallerysnap.domain.tree_models import Node

DELETED_MARK = " [deleted]"
NO_PREVIEW_MARK = " [no preview]"


def render_tree(root: Node) -> List[str]:
    """Render ``root`` with its name as the first line."""
    lines: List[str] = [root.name]
    render_tree_structure(root, lines)
    return lines


def render_tree_structure(node: Node, lines: List[str], prefix: str = "") -> None:
    """
    Recursively append one line per child of ``node`` to ``lines``.

    Uses standard ASCII connectors (├──, └──) and manages indentation
    levels for nested folders.

    Args:
        node: Folder whose children are rendered.
        lines: Accumulator list for output strings.
        prefix: Indentation prefix for the current recursion level.
    """
    total = len(node.children)

    for i, child in enumerate(node.children):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "

        if child.is_folder:
            lines.append(f"{prefix}{connector}{child.name}/")
            render_tree_structure(child, lines, prefix + ("    " if is_last else "│   "))
            continue

        label = child.name
        if child.is_deleted:
            label += DELETED_MARK
        if child.resource is None:
            label += NO_PREVIEW_MARK
        lines.append(f"{prefix}{connector}{label}")
