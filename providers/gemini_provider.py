"""
Google Gemini vision provider — uses the google-genai SDK.

Asks for application/json output; the reply is decoded into Structured when
it is a clean JSON object and passed on as RawText otherwise.
"""
from __future__ import annotations

import base64
import time
import logging

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

import config
from errors import RemoteAnalysisError
from normalizer import RemoteResponse
from providers.base import SYSTEM_PROMPT, USER_PROMPT, VisionProvider, decode_structured

logger = logging.getLogger(__name__)


class GeminiProvider(VisionProvider):

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash"):
        self.name     = "google"
        self.model_id = model
        # HttpOptions.timeout is in milliseconds
        self._client  = genai.Client(
            api_key=api_key,
            http_options={"timeout": int(config.VISION_TIMEOUT_SECONDS * 1000)},
        )

    async def analyse(self, image_b64: str, mime_type: str = "image/jpeg") -> RemoteResponse:
        gen_config = genai_types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            temperature=0.2,
            max_output_tokens=config.VISION_MAX_TOKENS,
            response_mime_type="application/json",
        )

        t0 = time.monotonic()
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_id,
                contents=[
                    genai_types.Part.from_bytes(
                        data=base64.b64decode(image_b64), mime_type=mime_type,
                    ),
                    USER_PROMPT,
                ],
                config=gen_config,
            )
        except genai_errors.APIError as exc:
            raise RemoteAnalysisError(str(exc), self.full_name) from exc

        latency_ms = int((time.monotonic() - t0) * 1000)
        raw = response.text
        if not raw:
            raise RemoteAnalysisError("empty response", self.full_name)

        logger.info("[%s] OK latency=%dms", self.full_name, latency_ms)
        return decode_structured(raw, self.full_name)
