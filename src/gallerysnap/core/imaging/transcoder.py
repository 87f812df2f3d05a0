from __future__ import annotations

"""
Image Transcoder.

Produces the downsized, re-encoded still image embedded in snapshot
documents: decode, shrink so the short edge is at most the target (never
upscale), resample with LANCZOS, re-encode as JPEG and wrap the result in a
data URL.

Decoding a full-resolution photo is CPU and memory heavy, so transcodes run
on a single worker thread and at most one call may be in flight at a time.
"""

import io
import logging
import math
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from gallerysnap.core.imaging.data_url import encode_data_url
from gallerysnap.domain.constants import (
    JPEG_QUALITY,
    OUTPUT_FORMAT,
    OUTPUT_MEDIA_TYPE,
    SHORT_EDGE_TARGET,
)
from gallerysnap.domain.errors import TranscoderBusyError
from gallerysnap.domain.tree_models import FileSource

logger = logging.getLogger(__name__)

# Errors that only invalidate the current file
_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    ValueError,
    SyntaxError,
)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def compute_target_size(
        width: int,
        height: int,
        short_edge_target: int = SHORT_EDGE_TARGET
) -> Tuple[int, int]:
    """
    Compute output dimensions for a ``width`` x ``height`` image.

    Both axes are scaled by ``short_edge_target / short_edge`` and rounded
    independently (half up), which can skew the aspect ratio by up to one
    pixel per axis. Images whose short edge already fits are left unchanged.

    Returns:
        Tuple[int, int]: (width, height) of the output image.
    """
    short_edge = min(width, height)
    if short_edge <= short_edge_target:
        return width, height

    scale = short_edge_target / short_edge
    return max(1, _round_half_up(width * scale)), max(1, _round_half_up(height * scale))


def transcode_image(
        source: FileSource,
        short_edge_target: int = SHORT_EDGE_TARGET,
        quality: int = JPEG_QUALITY,
) -> str:
    """
    Transcode one image source into an embeddable JPEG data URL.

    Read, decode and encode failures are logged and yield an empty string;
    they never abort the caller's walk. MemoryError is not swallowed.

    Args:
        source: Raw-bytes source of the original image.
        short_edge_target: Maximum short edge of the output, in pixels.
        quality: JPEG quality factor (1-95).

    Returns:
        str: 'data:image/jpeg;base64,...' or '' on failure.
    """
    try:
        raw = source.read()
    except OSError as e:
        logger.warning(f"Failed to read file for processing: {source.name} ({e})")
        return ""

    try:
        encoded = encode_jpeg(raw, short_edge_target, quality)
    except _DECODE_ERRORS as e:
        logger.warning(f"Failed to load image for processing: {source.name} ({e})")
        return ""

    return encode_data_url(encoded, OUTPUT_MEDIA_TYPE)


def encode_jpeg(
        raw: bytes,
        short_edge_target: int = SHORT_EDGE_TARGET,
        quality: int = JPEG_QUALITY,
) -> bytes:
    """Decode ``raw``, resize it to the target short edge and encode JPEG bytes."""
    with Image.open(io.BytesIO(raw)) as img:
        img.load()
        oriented = ImageOps.exif_transpose(img)
        size = compute_target_size(oriented.width, oriented.height, short_edge_target)

        rgb = _flatten_to_rgb(oriented)
        if rgb.size != size:
            rgb = rgb.resize(size, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        rgb.save(buffer, OUTPUT_FORMAT, quality=quality)
        return buffer.getvalue()


class ImageTranscoder:
    """
    Single-worker transcoding pipeline.

    Each call is executed on a dedicated worker thread, but a second call is
    rejected with :class:`TranscoderBusyError` until the previous result (or
    failure) has been produced.
    """

    def __init__(
            self,
            short_edge_target: int = SHORT_EDGE_TARGET,
            quality: int = JPEG_QUALITY,
    ):
        self.short_edge_target = short_edge_target
        self.quality = quality
        self._executor: Optional[ThreadPoolExecutor] = None
        self._busy = threading.Lock()

    def submit(self, source: FileSource) -> "Future[str]":
        """Start transcoding ``source`` and return a future for its payload."""
        if not self._busy.acquire(blocking=False):
            raise TranscoderBusyError("A transcode is already in flight.")

        try:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="Transcoder"
                )
            return self._executor.submit(self._run, source)
        except BaseException:
            self._busy.release()
            raise

    def _run(self, source: FileSource) -> str:
        # Released before the future resolves so a waiter can submit at once
        try:
            return transcode_image(source, self.short_edge_target, self.quality)
        finally:
            self._busy.release()

    def transcode(self, source: FileSource) -> str:
        """Transcode ``source`` and wait for the payload."""
        return self.submit(source).result()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> ImageTranscoder:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _flatten_to_rgb(img: Image.Image) -> Image.Image:
    """Convert to RGB, compositing transparency over black like a canvas export."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (0, 0, 0))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img
