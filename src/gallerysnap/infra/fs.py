from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, user data directory resolution
and the atomic persistence helper used when writing snapshot documents.
"""

import os
import tempfile
from datetime import date
from typing import Optional

from gallerysnap.domain.constants import (
    DEFAULT_SNAPSHOT_EXTENSION,
    DEFAULT_SNAPSHOT_PREFIX,
)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "GallerySnap"
UNIX_APP_DIR_NAME = ".gallerysnap"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/GallerySnap
    - Linux/Mac: ~/.gallerysnap

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def default_snapshot_filename(today: Optional[date] = None) -> str:
    """Build the dated default name, e.g. 'instant_oss_snapshot_2024-05-01.afm'."""
    stamp = (today or date.today()).isoformat()
    return f"{DEFAULT_SNAPSHOT_PREFIX}_{stamp}{DEFAULT_SNAPSHOT_EXTENSION}"

# -----------------------------------------------------------------------------
# PERSISTENCE API
# -----------------------------------------------------------------------------

def write_text_atomic(target_path: str, content: str) -> int:
    """
    Write UTF-8 text through a sibling temporary file and rename it into place.

    A failed write never leaves a truncated document at ``target_path``.

    Args:
        target_path: Final destination of the document.
        content: Text to persist.

    Returns:
        int: Number of bytes written.
    """
    out_dir = os.path.dirname(os.path.abspath(target_path))
    os.makedirs(out_dir, exist_ok=True)

    data = content.encode("utf-8")
    fd, tmp_path = tempfile.mkstemp(prefix=".gallerysnap-", suffix=".tmp", dir=out_dir)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, target_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    return len(data)
