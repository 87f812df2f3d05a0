from __future__ import annotations

"""
Domain Constants.

Centralizes the fixed values shared by the ingestion, transcoding and
snapshot subsystems: encoding targets, snapshot file naming and the
identifiers used by the tree model.
"""

from typing import Tuple

CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# TREE MODEL
# -----------------------------------------------------------------------------
ROOT_ID = "root"
ROOT_NAME = "Root"
PATH_SEPARATOR = "/"
HIDDEN_FILE_MARKER = "."
IMAGE_MEDIA_PREFIX = "image/"

# -----------------------------------------------------------------------------
# IMAGE TRANSCODING
# -----------------------------------------------------------------------------
SHORT_EDGE_TARGET = 1024
JPEG_QUALITY = 85
OUTPUT_MEDIA_TYPE = "image/jpeg"
OUTPUT_FORMAT = "JPEG"

# -----------------------------------------------------------------------------
# SNAPSHOT FILES
# -----------------------------------------------------------------------------
SNAPSHOT_EXTENSIONS: Tuple[str, ...] = (".afm", ".json")
DEFAULT_SNAPSHOT_PREFIX = "instant_oss_snapshot"
DEFAULT_SNAPSHOT_EXTENSION = ".afm"
