# resume_insights/services/llm_adapters/gemini_adapter.py
"""
Google Gemini adapter (google-genai SDK). Asks for a JSON response body.
"""

import logging
from typing import Optional

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class GeminiAdapter:
    name = "gemini"

    def __init__(self, api_key: str, model: str, timeout: Optional[float] = None, client=None):
        if not api_key and client is None:
            raise RuntimeError("LLM_API_KEY unset for gemini adapter")
        http_options = None
        if timeout:
            # google-genai takes milliseconds
            http_options = types.HttpOptions(timeout=int(timeout * 1000))
        self._client = client or genai.Client(api_key=api_key, http_options=http_options)
        self.model = model

    async def generate(self, task: str, prompt: str) -> str:
        logger.debug("Gemini %s task=%s", self.model, task)
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(response_mime_type="application/json"),
        )
        return response.text or ""


def build_adapter(settings) -> GeminiAdapter:
    return GeminiAdapter(settings.LLM_API_KEY, settings.LLM_MODEL, timeout=settings.LLM_TIMEOUT_SEC)
