"""
Provider Manager — picks and caches the vision provider used by the pipeline.

Selection (config.VISION_PROVIDER):
  auto      : first provider whose API key is set, in the order
               openai → anthropic → google
  openai    : OpenAIProvider    (config.OPENAI_MODEL)
  anthropic : AnthropicProvider (config.ANTHROPIC_MODEL)
  google    : GeminiProvider    (config.GEMINI_MODEL)

A missing key is a configuration error: get_provider() raises ConfigError
before any image is touched.
"""
from __future__ import annotations

import logging
from typing import Optional

import config
from errors import ConfigError
from providers.base import VisionProvider

logger = logging.getLogger(__name__)

# Module-level cache, cleared by reset() when settings change
_provider: Optional[VisionProvider] = None


def _resolve_name() -> str:
    name = (config.VISION_PROVIDER or "auto").strip().lower()
    if name != "auto":
        return name
    available = config.configured_providers()
    if not available:
        raise ConfigError(
            "No vision provider configured.\n"
            "Set one of OPENAI_API_KEY, ANTHROPIC_API_KEY or GOOGLE_API_KEY."
        )
    return available[0]


def _build_provider() -> VisionProvider:
    name = _resolve_name()
    api_key = config.api_key_for(name)

    if name == "openai":
        from providers.openai_provider import OpenAIProvider
        provider: VisionProvider = OpenAIProvider(api_key, config.OPENAI_MODEL)
    elif name == "anthropic":
        from providers.anthropic_provider import AnthropicProvider
        provider = AnthropicProvider(api_key, config.ANTHROPIC_MODEL)
    else:
        from providers.gemini_provider import GeminiProvider
        provider = GeminiProvider(api_key, config.GEMINI_MODEL)

    logger.info("Loaded provider: %s", provider.full_name)
    return provider


async def get_provider() -> VisionProvider:
    global _provider
    if _provider is None:
        _provider = _build_provider()
    return _provider


def reset() -> None:
    """Drop the cached provider so the next call rebuilds it from config."""
    global _provider
    _provider = None
