"""
Shared pytest fixtures.

Every test starts with an empty provider cache and a log-only notification
sink, so tests are isolated from each other and from any real API keys in
the developer's environment.
"""
from __future__ import annotations

import io
import struct
import sys
import zlib
from pathlib import Path

import pytest
from PIL import Image

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def isolated_pipeline(monkeypatch):
    """Clear cached provider, notification sink and API keys for every test."""
    import config
    import notifications
    import providers.manager as manager_mod

    for attr in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.setattr(config, attr, None)
    monkeypatch.setattr(config, "VISION_PROVIDER", "auto")

    manager_mod.reset()
    notifications.init(None)
    yield
    manager_mod.reset()
    notifications.init(None)


def _encode(img: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Factory: make_image(width, height, color=(200, 30, 30), fmt="PNG") → bytes."""
    def _make(width: int = 60, height: int = 90, color=(200, 30, 30), fmt: str = "PNG") -> bytes:
        mode = "RGBA" if len(color) == 4 else "RGB"
        return _encode(Image.new(mode, (width, height), color), fmt)
    return _make


@pytest.fixture
def png_bytes(make_image) -> bytes:
    return make_image(60, 90)


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return (
        struct.pack(">I", len(data)) + kind + data
        + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)
    )


@pytest.fixture
def oversized_png() -> bytes:
    """Header-only PNG declaring 20000×20000 pixels, past Pillow's bomb limit."""
    header = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IEND", b"")
    )
