from __future__ import annotations

"""
Image Directory Scanner.

Walks a local directory and yields ingestion entries the same way a
directory picker would hand them over: relative paths prefixed by the picked
directory's own name, '/'-separated, with a guessed media type and a lazy
on-disk source.
"""

import logging
import mimetypes
import os
from typing import Iterator

from gallerysnap.domain.constants import HIDDEN_FILE_MARKER, PATH_SEPARATOR
from gallerysnap.domain.snapshot_models import FileEntry
from gallerysnap.domain.tree_models import PathSource

logger = logging.getLogger(__name__)

_FALLBACK_MEDIA_TYPE = "application/octet-stream"

# Formats Pillow decodes that the stdlib table may not know
_EXTRA_IMAGE_TYPES = {
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".avif": "image/avif",
}

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def yield_image_entries(input_path: str, include_hidden: bool = False) -> Iterator[FileEntry]:
    """
    Traverse ``input_path`` and yield one entry per regular file.

    Hidden directories are pruned unless ``include_hidden`` is set. Hidden
    and non-image files are still yielded: rejecting them is the tree
    builder's job.

    Args:
        input_path: Directory picked by the user.
        include_hidden: Descend into directories starting with '.'.

    Yields:
        FileEntry: Entry with a '/'-separated path such as 'photos/sub/b.png'.
    """
    base = os.path.abspath(input_path)
    top_name = os.path.basename(base.rstrip(os.sep)) or base

    if not os.path.isdir(base):
        raise NotADirectoryError(base)

    for root, dirs, files in os.walk(base):
        if not include_hidden:
            dirs[:] = [d for d in dirs if not d.startswith(HIDDEN_FILE_MARKER)]
        dirs.sort()
        files.sort()

        for file_name in files:
            file_path = os.path.join(root, file_name)
            if not os.path.isfile(file_path):
                continue

            rel = os.path.relpath(file_path, base).replace(os.sep, PATH_SEPARATOR)
            media_type = guess_media_type(file_name)
            yield FileEntry(
                rel_path=f"{top_name}{PATH_SEPARATOR}{rel}",
                source=PathSource(file_path, file_name, media_type),
                media_type=media_type,
            )


def guess_media_type(file_name: str) -> str:
    """Guess a MIME label from the file extension."""
    _, ext = os.path.splitext(file_name)
    extra = _EXTRA_IMAGE_TYPES.get(ext.lower())
    if extra:
        return extra
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or _FALLBACK_MEDIA_TYPE
