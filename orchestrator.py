"""
Analysis orchestrator — one batch of uploaded images in, one result per image out.

Per image (all images run concurrently, bounded by MAX_CONCURRENT_ANALYSES):
  1. synthetic heatmap           (heatmap.py; None if the image will not decode)
  2. base64 encode + provider call
  3. normalise the reply         (normalizer.py)
     or, if the provider raised, a simulated analysis (fallback.py)
  4. merge into an AnalysisResult

Provider failures and unexpected per-image errors never reach the caller;
the returned list always has the same length and order as the input.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Optional, Sequence

import config
import notifications
from errors import ImageLoadError
from fallback import simulated_analysis
from heatmap import synthesize_heatmap
from image_codec import detect_mime, encode_to_transport_string, to_data_uri
from models import AnalysisResult, PackagingAnalysis, UploadedImage
from normalizer import Failure, failure_analysis, normalize_response
from providers.base import VisionProvider

logger = logging.getLogger(__name__)


async def _render_heatmap(image: UploadedImage, heat_rng) -> Optional[str]:
    # Pillow/numpy work runs in a worker thread, off the event loop
    try:
        jpeg = await asyncio.to_thread(synthesize_heatmap, image.raw_bytes, heat_rng)
    except ImageLoadError as exc:
        logger.warning("[%s] Heatmap skipped: %s", image.id, exc)
        return None
    except Exception:
        logger.exception("[%s] Heatmap rendering failed", image.id)
        return None
    return to_data_uri(jpeg, "image/jpeg")


async def _remote_analysis(
    image: UploadedImage,
    provider: VisionProvider,
    rng: Optional[random.Random],
) -> PackagingAnalysis:
    try:
        image_b64 = encode_to_transport_string(image.raw_bytes)
    except ImageLoadError as exc:
        logger.warning("[%s] Cannot encode image: %s", image.id, exc)
        return normalize_response(Failure(exc))

    try:
        response = await provider.analyse(image_b64, detect_mime(image.raw_bytes))
    except Exception as exc:
        # RemoteAnalysisError from our adapters, anything else from the SDK
        logger.error("[%s] %s failed: %s", image.id, provider.full_name, exc)
        await notifications.send(
            "AI analysis failed",
            "Showing simulated scores instead.",
            notifications.DESTRUCTIVE,
        )
        return simulated_analysis(rng)

    return normalize_response(response)


async def _analyse_one(
    image: UploadedImage,
    provider: VisionProvider,
    semaphore: asyncio.Semaphore,
    rng: Optional[random.Random],
    heat_rng,
) -> AnalysisResult:
    async with semaphore:
        heatmap_src = await _render_heatmap(image, heat_rng)
        analysis = await _remote_analysis(image, provider, rng)

    original_src = image.preview
    if original_src is None and image.raw_bytes:
        original_src = to_data_uri(image.raw_bytes)

    logger.info(
        "[%s] attention=%.1f suggestions=%d heatmap=%s",
        image.id, analysis.attention_score, len(analysis.suggestions),
        "yes" if heatmap_src else "no",
    )
    return AnalysisResult.build(image, heatmap_src, analysis, original_src=original_src)


async def _safe_analyse_one(
    image: UploadedImage,
    provider: VisionProvider,
    semaphore: asyncio.Semaphore,
    rng: Optional[random.Random],
    heat_rng,
) -> AnalysisResult:
    """_analyse_one, but an unexpected error still yields a result for this image."""
    try:
        return await _analyse_one(image, provider, semaphore, rng, heat_rng)
    except Exception:
        logger.exception("[%s] Analysis failed unexpectedly", image.id)
        return AnalysisResult.build(
            image, None, failure_analysis(), original_src=image.preview,
        )


async def analyse_images(
    images: Sequence[UploadedImage],
    provider: Optional[VisionProvider] = None,
    rng: Optional[random.Random] = None,
    heat_rng=None,
) -> list[AnalysisResult]:
    """
    Analyse every image and return one AnalysisResult per image, in order.

    provider  defaults to providers.manager.get_provider(); a missing key
              raises ConfigError here, before any image is processed
    rng       random.Random for simulated fallbacks
    heat_rng  numpy-style generator for heatmap noise
    """
    if not images:
        return []

    if provider is None:
        from providers.manager import get_provider
        provider = await get_provider()

    await notifications.send(
        "Analyzing images",
        f"Running AI vision model on {len(images)} image(s)…",
    )

    semaphore = asyncio.Semaphore(max(1, config.MAX_CONCURRENT_ANALYSES))
    results = await asyncio.gather(*[
        _safe_analyse_one(image, provider, semaphore, rng, heat_rng) for image in images
    ])
    return list(results)
