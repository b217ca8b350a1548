"""
Tests for image_codec.py.

Covers:
  - detect_mime(): PNG / GIF / WEBP / JPEG default
  - load_image(): decodes valid bytes, ImageLoadError otherwise
  - encode_to_transport_string(): bytes and data URIs, prefix stripped
  - to_data_uri() / from_data_uri()
"""
from __future__ import annotations

import base64

import pytest

from errors import ImageLoadError
from image_codec import (
    detect_mime,
    encode_to_transport_string,
    from_data_uri,
    load_image,
    to_data_uri,
)


# ── detect_mime ───────────────────────────────────────────────────────────────

class TestDetectMime:
    def test_png(self, png_bytes):
        assert detect_mime(png_bytes) == "image/png"

    def test_jpeg(self, make_image):
        assert detect_mime(make_image(fmt="JPEG")) == "image/jpeg"

    def test_gif(self):
        assert detect_mime(b"GIF89a....") == "image/gif"

    def test_webp(self):
        assert detect_mime(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"

    def test_unknown_defaults_to_jpeg(self):
        assert detect_mime(b"\x00\x01\x02") == "image/jpeg"


# ── load_image ────────────────────────────────────────────────────────────────

class TestLoadImage:
    def test_valid_png(self, make_image):
        img = load_image(make_image(33, 17))
        assert img.size == (33, 17)

    def test_empty_bytes_raise(self):
        with pytest.raises(ImageLoadError):
            load_image(b"")

    def test_garbage_raises(self):
        with pytest.raises(ImageLoadError, match="Failed to load image"):
            load_image(b"definitely not an image")

    def test_decompression_bomb_raises(self, oversized_png):
        with pytest.raises(ImageLoadError, match="Failed to load image"):
            load_image(oversized_png)

    def test_truncated_png_raises(self, png_bytes):
        with pytest.raises(ImageLoadError):
            load_image(png_bytes[: len(png_bytes) // 2])


# ── encode_to_transport_string ────────────────────────────────────────────────

class TestEncodeToTransportString:
    def test_bytes_round_trip(self, png_bytes):
        encoded = encode_to_transport_string(png_bytes)
        assert base64.b64decode(encoded) == png_bytes

    def test_data_uri_prefix_is_stripped(self, png_bytes):
        uri = to_data_uri(png_bytes)
        encoded = encode_to_transport_string(uri)
        assert not encoded.startswith("data:")
        assert "," not in encoded
        assert base64.b64decode(encoded) == png_bytes

    def test_bare_base64_string_accepted(self, png_bytes):
        b64 = base64.b64encode(png_bytes).decode()
        assert encode_to_transport_string(b64) == b64

    def test_none_raises(self):
        with pytest.raises(ImageLoadError):
            encode_to_transport_string(None)

    def test_empty_bytes_raise(self):
        with pytest.raises(ImageLoadError, match="empty"):
            encode_to_transport_string(b"")

    def test_malformed_data_uri_raises(self):
        with pytest.raises(ImageLoadError):
            encode_to_transport_string("data:image/png;base64")

    def test_invalid_base64_raises(self):
        with pytest.raises(ImageLoadError):
            encode_to_transport_string("data:image/png;base64,@@@not-base64@@@")


# ── data URIs ─────────────────────────────────────────────────────────────────

class TestDataUri:
    def test_mime_sniffed_when_not_given(self, png_bytes):
        assert to_data_uri(png_bytes).startswith("data:image/png;base64,")

    def test_explicit_mime(self, png_bytes):
        assert to_data_uri(png_bytes, "image/jpeg").startswith("data:image/jpeg;base64,")

    def test_from_data_uri_decodes(self, png_bytes):
        assert from_data_uri(to_data_uri(png_bytes)) == png_bytes
