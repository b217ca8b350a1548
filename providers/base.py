"""
Shared prompt, schema and base class for all vision providers.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

from normalizer import RawText, RemoteResponse, Structured

logger = logging.getLogger(__name__)

# ── Prompt (shared across all providers) ──────────────────────────────────────

SYSTEM_PROMPT = (
    "You are a packaging design expert with expertise in consumer attention. "
    "Analyze packaging designs and provide specific, actionable feedback."
)

USER_PROMPT = """Analyze this product packaging design. Provide your response in the following JSON format:
{
  "attentionScore":  [number between 1-10],
  "colorImpact":     [number between 1-10],
  "readability":     [number between 1-10],
  "brandVisibility": [number between 1-10],
  "suggestions":     [array of 3-5 specific suggestions as strings],
  "analysis":        [detailed analysis text]
}

Focus on color, contrast, visual hierarchy, branding elements, and overall composition.
Return ONLY the JSON object, with no markdown and no prose."""

# JSON schema for providers that support schema-constrained output
PACKAGING_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "attentionScore":  {"type": "number"},
        "colorImpact":     {"type": "number"},
        "readability":     {"type": "number"},
        "brandVisibility": {"type": "number"},
        "suggestions":     {"type": "array", "items": {"type": "string"}},
        "analysis":        {"type": "string"},
    },
    "required": [
        "attentionScore", "colorImpact", "readability",
        "brandVisibility", "suggestions", "analysis",
    ],
    "additionalProperties": False,
}


def decode_structured(raw: str, provider_name: str) -> RemoteResponse:
    """
    Decode a schema-constrained reply.
    A JSON object becomes Structured; anything else is passed on as RawText so
    the normaliser can still dig something out of it.
    """
    text = raw.strip()
    # Strip ```json ... ``` or ``` ... ``` fences if present
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("[%s] Non-JSON response: %s", provider_name, raw[:300])
        return RawText(raw)
    if not isinstance(data, dict):
        return RawText(raw)
    return Structured(data)


# ── Abstract base ──────────────────────────────────────────────────────────────

class VisionProvider(ABC):
    """Base class all vision providers must implement."""

    name: str           # e.g. "openai"
    model_id: str       # e.g. "gpt-4o"

    @abstractmethod
    async def analyse(self, image_b64: str, mime_type: str = "image/jpeg") -> RemoteResponse:
        """
        Ask the model to analyse one base64-encoded image.
        Raises RemoteAnalysisError if the call fails or the reply is empty.
        """
        ...

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"
