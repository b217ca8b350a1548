"""
Central configuration — reads from .env file.

All settings are plain module attributes read once at import time.
Code that needs a setting reads config.X at call time, so tests (and any
embedding application) can override a value with a simple attribute
assignment without reloading the module.

No credentials are baked into source: a missing API key only becomes an
error when a provider is actually built (see api_key_for()).
"""
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

from errors import ConfigError

load_dotenv()


def _int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


# ── AI Vision providers ────────────────────────────────────────────────────────
# Add a key for whichever provider you have access to.
OPENAI_API_KEY: Optional[str]    = os.getenv("OPENAI_API_KEY") or None
ANTHROPIC_API_KEY: Optional[str] = os.getenv("ANTHROPIC_API_KEY") or None
GOOGLE_API_KEY: Optional[str]    = os.getenv("GOOGLE_API_KEY") or None

# Which provider analyses the packaging:
#   auto       → first provider with a key, in the order openai, anthropic, google
#   openai     → OpenAI chat completions (JSON-schema constrained)
#   anthropic  → Anthropic messages (free text, best-effort parsed)
#   google     → Gemini via google-genai (JSON mime type)
VISION_PROVIDER: str = os.getenv("VISION_PROVIDER", "auto").strip().lower()

OPENAI_MODEL: str    = os.getenv("OPENAI_MODEL", "gpt-4o")
ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022")
GEMINI_MODEL: str    = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

# Per-request timeout handed to the provider SDK. A timeout surfaces as an
# ordinary provider failure and triggers the simulated analysis.
VISION_TIMEOUT_SECONDS: float = _float("VISION_TIMEOUT_SECONDS", 60.0)
VISION_MAX_TOKENS: int        = _int("VISION_MAX_TOKENS", 1024)

# ── Pipeline ──────────────────────────────────────────────────────────────────
# Upper bound on images analysed at the same time within one batch.
MAX_CONCURRENT_ANALYSES: int = _int("MAX_CONCURRENT_ANALYSES", 4)
HEATMAP_JPEG_QUALITY: int    = _int("HEATMAP_JPEG_QUALITY", 85)

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# provider name → config attribute holding its key
_KEY_ATTRS: dict[str, str] = {
    "openai":    "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google":    "GOOGLE_API_KEY",
}


def api_key_for(provider_name: str) -> str:
    """
    Return the API key configured for provider_name.
    Raises ConfigError if the provider is unknown or its key is not set.
    """
    attr = _KEY_ATTRS.get(provider_name)
    if attr is None:
        known = ", ".join(_KEY_ATTRS)
        raise ConfigError(f"Unknown vision provider '{provider_name}'. Known: {known}")
    value = globals().get(attr)
    if not value:
        raise ConfigError(f"{attr} is not set; add it to your environment or .env file")
    return value


def configured_providers() -> list[str]:
    """Provider names whose key is present, in preference order."""
    return [name for name, attr in _KEY_ATTRS.items() if globals().get(attr)]
