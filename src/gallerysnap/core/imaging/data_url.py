from __future__ import annotations

"""
Embedded Payload Codec.

Encodes binary image content as self-describing, text-safe data URLs
('data:image/jpeg;base64,...') and decodes them back.
"""

import base64
import binascii
import re
from typing import Tuple

_DATA_URL_RX = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*),(?P<payload>.*)$", re.DOTALL)


def encode_data_url(data: bytes, media_type: str) -> str:
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{payload}"


def decode_data_url(text: str) -> Tuple[bytes, str]:
    """
    Decode a base64 data URL.

    Args:
        text: Data URL string.

    Returns:
        Tuple[bytes, str]: (Decoded bytes, media type).

    Raises:
        ValueError: If the string is not a base64 data URL.
    """
    match = _DATA_URL_RX.match(text or "")
    if not match:
        raise ValueError("Not a data URL.")
    if ";base64" not in match.group("params"):
        raise ValueError("Only base64 data URLs are supported.")

    try:
        data = base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Corrupted base64 payload: {e}") from e

    return data, match.group("mime") or "application/octet-stream"
