from __future__ import annotations

"""
Unit tests for the ASCII Tree Renderer.
"""

from gallerysnap.core.analysis.tree_renderer import render_tree
from gallerysnap.core.ingestion.builder import build_tree


def test_render_reference_scenario(scenario_entries, registry) -> None:
    result = build_tree(scenario_entries, registry)
    result.all_images[0].is_deleted = True
    result.all_images[1].resource = None

    assert render_tree(result.root) == [
        "Root",
        "└── photos/",
        "    ├── a.png [deleted]",
        "    └── sub/",
        "        └── b.png [no preview]",
    ]
