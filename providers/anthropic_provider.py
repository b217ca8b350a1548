"""
Anthropic vision provider — Claude models via the messages API.

Claude has no schema-constrained output here, so replies go to the normaliser
as RawText and are parsed best-effort (embedded JSON, then regex).
"""
from __future__ import annotations

import time
import logging

import anthropic

import config
from errors import RemoteAnalysisError
from normalizer import RawText, RemoteResponse
from providers.base import SYSTEM_PROMPT, USER_PROMPT, VisionProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(VisionProvider):

    def __init__(self, api_key: str, model: str = "claude-3-5-sonnet-20241022"):
        self.name = "anthropic"
        self.model_id = model
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=config.VISION_TIMEOUT_SECONDS,
        )

    async def analyse(self, image_b64: str, mime_type: str = "image/jpeg") -> RemoteResponse:
        t0 = time.monotonic()
        try:
            message = await self._client.messages.create(
                model=self.model_id,
                max_tokens=config.VISION_MAX_TOKENS,
                system=SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": mime_type,
                                    "data": image_b64,
                                },
                            },
                            {"type": "text", "text": USER_PROMPT},
                        ],
                    }
                ],
            )
        except anthropic.AnthropicError as exc:
            raise RemoteAnalysisError(str(exc), self.full_name) from exc

        latency_ms = int((time.monotonic() - t0) * 1000)
        raw = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        if not raw.strip():
            raise RemoteAnalysisError("empty response", self.full_name)

        logger.info("[%s] OK latency=%dms", self.full_name, latency_ms)
        return RawText(raw)
