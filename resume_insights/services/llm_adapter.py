# resume_insights/services/llm_adapter.py
"""
Pluggable LLM adapter loader.

LLM_ADAPTER: "mock" (default), "http", "gemini", or a dotted module path.
An adapter module exposes build_adapter(settings) returning an object with
    async def generate(task: str, prompt: str) -> str
"""

import importlib
import logging

from resume_insights.core.config import Settings

logger = logging.getLogger(__name__)

_BUILTIN = {
    "mock": "resume_insights.services.llm_adapters.mock_adapter",
    "http": "resume_insights.services.llm_adapters.http_adapter",
    "gemini": "resume_insights.services.llm_adapters.gemini_adapter",
}


def load_adapter(settings: Settings):
    name = (settings.LLM_ADAPTER or "mock").strip()
    mod = importlib.import_module(_BUILTIN.get(name.lower(), name))
    if not hasattr(mod, "build_adapter"):
        raise RuntimeError(f"Adapter {name} does not expose build_adapter()")
    adapter = mod.build_adapter(settings)
    if not hasattr(adapter, "generate"):
        raise RuntimeError(f"Adapter {name} does not implement generate()")
    logger.info("Using LLM adapter %s", name)
    return adapter
