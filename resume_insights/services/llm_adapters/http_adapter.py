# resume_insights/services/llm_adapters/http_adapter.py
"""
Async HTTP adapter to call an external LLM HTTP endpoint.

Request:  {"task": <task>, "prompt": <prompt>}
Response: JSON object; if it carries a string "text" field that string is the
model output, otherwise the raw body is.

Env configuration:
- LLM_HTTP_URL: required for this adapter
- LLM_API_KEY: optional, sent as Authorization: Bearer <key>
- LLM_TIMEOUT_SEC: request timeout (unset = wait as long as the service takes)

No retries: a failed call surfaces to the caller.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class HttpAdapter:
    name = "http"

    def __init__(self, url: str, api_key: Optional[str] = None, timeout: Optional[float] = None,
                 client: Optional[httpx.AsyncClient] = None):
        if not url:
            raise RuntimeError("LLM_HTTP_URL unset for http adapter")
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _headers(self):
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post(self, client: httpx.AsyncClient, body) -> str:
        resp = await client.post(self.url, json=body, headers=self._headers(), timeout=self.timeout)
        resp.raise_for_status()
        try:
            payload = resp.json()
        except ValueError:
            return resp.text
        if isinstance(payload, dict) and isinstance(payload.get("text"), str):
            return payload["text"]
        return resp.text

    async def generate(self, task: str, prompt: str) -> str:
        body = {"task": task, "prompt": prompt}
        logger.debug("POST %s task=%s (%s chars)", self.url, task, len(prompt))
        if self._client is not None:
            return await self._post(self._client, body)
        async with httpx.AsyncClient() as client:
            return await self._post(client, body)


def build_adapter(settings) -> HttpAdapter:
    url = str(settings.LLM_HTTP_URL) if settings.LLM_HTTP_URL else None
    return HttpAdapter(url, api_key=settings.LLM_API_KEY, timeout=settings.LLM_TIMEOUT_SEC)
