"""
OpenAI vision provider — gpt-4o family via chat completions.

Uses a strict JSON-schema response format, so a healthy reply decodes
straight into a Structured response.
"""
from __future__ import annotations

import time
import logging

import openai
from openai import AsyncOpenAI

import config
from errors import RemoteAnalysisError
from normalizer import RemoteResponse
from providers.base import (
    PACKAGING_SCHEMA, SYSTEM_PROMPT, USER_PROMPT,
    VisionProvider, decode_structured,
)

logger = logging.getLogger(__name__)


class OpenAIProvider(VisionProvider):

    def __init__(self, api_key: str, model: str = "gpt-4o"):
        self.name = "openai"
        self.model_id = model
        self._client = AsyncOpenAI(api_key=api_key, timeout=config.VISION_TIMEOUT_SECONDS)

    async def analyse(self, image_b64: str, mime_type: str = "image/jpeg") -> RemoteResponse:
        t0 = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=self.model_id,
                max_tokens=config.VISION_MAX_TOKENS,
                temperature=0.2,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "packaging_analysis",
                        "strict": True,
                        "schema": PACKAGING_SCHEMA,
                    },
                },
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": USER_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": f"data:{mime_type};base64,{image_b64}",
                                    "detail": "high",
                                },
                            },
                        ],
                    },
                ],
            )
        except openai.OpenAIError as exc:
            raise RemoteAnalysisError(str(exc), self.full_name) from exc

        latency_ms = int((time.monotonic() - t0) * 1000)
        raw = response.choices[0].message.content if response.choices else None
        if not raw:
            raise RemoteAnalysisError("empty response", self.full_name)

        logger.info("[%s] OK latency=%dms", self.full_name, latency_ms)
        return decode_structured(raw, self.full_name)
