"""
Synthetic attention heatmap — no model involved.

A cheap visual-attention proxy so there is always something to show next to
the AI scores, even when no provider is reachable:

  • centre bias      pixels near the middle of the pack score higher
  • top-third boost  brand/logo prior for the upper third
  • a little uniform noise so the overlay does not look machined

The noise is NOT seeded; pass your own generator (anything with a numpy-style
random(size) method) when exact pixel values matter.

Heat → colour:
  heat > 0.6   red → yellow   (R=255, G rises with heat, B=0)
  heat ≤ 0.6   blue → green   (R=0,   G rises,           B falls)
  alpha        128 × heat     (at most ~50 % opacity)
"""
from __future__ import annotations

import io
import logging
from typing import Optional

import numpy as np
from PIL import Image

import config
from image_codec import load_image

logger = logging.getLogger(__name__)

CENTER_WEIGHT = 0.6
TOP_WEIGHT    = 0.3
NOISE_WEIGHT  = 0.2
HOT_THRESHOLD = 0.6
MAX_ALPHA     = 128
# Opacity of the artwork redrawn over the tint
ARTWORK_OPACITY = 0.7


def heat_map(width: int, height: int, rng=None) -> np.ndarray:
    """
    Return a (height, width) float array of heat values in [0, 1].
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid heatmap size {width}x{height}")
    rng = rng if rng is not None else np.random.default_rng()

    half_w, half_h = width / 2, height / 2
    y, x = np.ogrid[:height, :width]

    # Normalised radial distance from the centre (1.0 at edge midpoints)
    dist = np.sqrt(((x - half_w) / half_w) ** 2 + ((y - half_h) / half_h) ** 2)
    top_boost = 1 - np.clip(y / (height / 3), 0, 1)
    noise = np.asarray(rng.random((height, width)), dtype=np.float64)

    heat = CENTER_WEIGHT * (1 - dist) + TOP_WEIGHT * top_boost + NOISE_WEIGHT * noise
    return np.clip(heat, 0.0, 1.0)


def heat_to_rgba(heat: np.ndarray) -> np.ndarray:
    """Map heat values to an (H, W, 4) uint8 RGBA overlay."""
    heat = np.asarray(heat, dtype=np.float64)
    hot = heat > HOT_THRESHOLD

    red   = np.where(hot, 255.0, 0.0)
    green = np.where(hot,
                     255 * (heat - HOT_THRESHOLD) / (1 - HOT_THRESHOLD),
                     255 * heat / HOT_THRESHOLD)
    blue  = np.where(hot, 0.0, 255 * (HOT_THRESHOLD - heat) / HOT_THRESHOLD)
    # Rounded up: a pixel is fully transparent only where heat is exactly 0
    alpha = np.ceil(MAX_ALPHA * heat)

    rgba = np.stack([np.rint(red), np.rint(green), np.rint(blue), alpha], axis=-1)
    return np.clip(rgba, 0, 255).astype(np.uint8)


def _flatten(image: Image.Image) -> Image.Image:
    """Opaque RGBA copy of image; transparent areas become white."""
    rgba = image.convert("RGBA")
    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        rgba = Image.alpha_composite(background, rgba)
    return rgba


def render_overlay(image: Image.Image, heat: np.ndarray) -> Image.Image:
    """
    Compose artwork + heat layer + artwork at 70 % so the pack stays legible
    under the tint. Returns an RGB image the same size as image.
    """
    if heat.shape != (image.height, image.width):
        raise ValueError(
            f"Heat map shape {heat.shape} does not match image {image.width}x{image.height}"
        )
    base = _flatten(image)
    layer = Image.fromarray(heat_to_rgba(heat))
    tinted = Image.alpha_composite(base, layer)
    return Image.blend(tinted, base, ARTWORK_OPACITY).convert("RGB")


def synthesize_heatmap(
    image_bytes: bytes,
    rng=None,
    quality: Optional[int] = None,
) -> bytes:
    """
    Render a heatmap overlay for image_bytes and return it as JPEG bytes.
    Raises ImageLoadError if the image cannot be decoded.
    """
    image = load_image(image_bytes)
    heat = heat_map(image.width, image.height, rng)
    overlay = render_overlay(image, heat)

    buf = io.BytesIO()
    overlay.save(buf, format="JPEG", quality=quality or config.HEATMAP_JPEG_QUALITY)
    logger.debug(
        "Heatmap rendered %dx%d (mean heat %.3f)", image.width, image.height, float(heat.mean())
    )
    return buf.getvalue()
