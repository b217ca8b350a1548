"""
image_codec.py — byte/base64 helpers for images travelling to a vision model
or back to the caller as displayable data URIs.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Union

from PIL import Image, UnidentifiedImageError

from errors import ImageLoadError

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, memoryview, str]


def detect_mime(image_bytes: bytes) -> str:
    """Sniff the MIME type from magic bytes (default jpeg)."""
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"GIF8":
        return "image/gif"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def load_image(image_bytes: bytes) -> Image.Image:
    """
    Fully decode image_bytes with Pillow.
    Raises ImageLoadError if the bytes are empty or not a readable image.
    """
    if not image_bytes:
        raise ImageLoadError("Image is empty")
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, MemoryError,
            OSError, ValueError, SyntaxError, EOFError) as exc:
        raise ImageLoadError(f"Failed to load image: {exc}") from exc
    return img


def _split_data_uri(uri: str) -> tuple[str, str]:
    """Return (mime, payload) for a data URI, or ("", uri) for bare base64."""
    if not uri.startswith("data:"):
        return "", uri
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ImageLoadError("Malformed data URI: missing ',' separator")
    mime = header[len("data:"):].split(";", 1)[0]
    return mime, payload


def from_data_uri(uri: str) -> bytes:
    """Decode a data URI (or bare base64 text) back to raw bytes."""
    _, payload = _split_data_uri(uri.strip())
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageLoadError(f"Invalid base64 image payload: {exc}") from exc


def to_data_uri(image_bytes: bytes, mime: str | None = None) -> str:
    mime = mime or detect_mime(image_bytes)
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode()}"


def encode_to_transport_string(image: ImageSource) -> str:
    """
    Encode an image for transmission to a vision model.

    Accepts raw bytes or a data URI / base64 string and always returns plain
    base64 text with no "data:image/...;base64," prefix. The image must be
    loaded (non-empty); anything else raises ImageLoadError.
    """
    if image is None:
        raise ImageLoadError("No image supplied")

    if isinstance(image, str):
        # Round-trip through bytes so garbage never reaches the provider
        raw = from_data_uri(image)
    else:
        raw = bytes(image)

    if not raw:
        raise ImageLoadError("Image is empty")
    return base64.b64encode(raw).decode("ascii")
