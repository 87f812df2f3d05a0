from __future__ import annotations

"""
Domain Exception Hierarchy.

Tree-level failures abort a whole import or export and surface as one of
these types. File-level transcoding failures never raise; they are logged
and produce an empty payload instead.
"""


class GallerySnapError(Exception):
    """Base class for all application errors."""


class InvalidSnapshotError(GallerySnapError):
    """The snapshot document is not valid JSON or lacks the required shape."""


class SnapshotExportError(GallerySnapError):
    """The export walk failed as a whole; the partial result is discarded."""


class ResourceReleasedError(GallerySnapError):
    """A displayable resource was accessed after it had been released."""


class TranscoderBusyError(GallerySnapError):
    """A second transcode was requested while one was still in flight."""
