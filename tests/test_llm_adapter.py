# tests/test_llm_adapter.py
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from resume_insights.core.config import Settings
from resume_insights.services.llm_adapter import load_adapter
from resume_insights.services.llm_adapters.gemini_adapter import GeminiAdapter
from resume_insights.services.llm_adapters.http_adapter import HttpAdapter
from resume_insights.services.llm_adapters.mock_adapter import MockAdapter


def _settings(**kw):
    return Settings(_env_file=None, **kw)


def test_load_builtin_adapters():
    assert isinstance(load_adapter(_settings(LLM_ADAPTER="mock")), MockAdapter)
    assert isinstance(load_adapter(_settings(LLM_ADAPTER="HTTP", LLM_HTTP_URL="https://llm.example.com/v1")),
                      HttpAdapter)
    assert isinstance(load_adapter(_settings(LLM_ADAPTER="gemini", LLM_API_KEY="k")), GeminiAdapter)


def test_load_adapter_by_module_path():
    adapter = load_adapter(_settings(LLM_ADAPTER="resume_insights.services.llm_adapters.mock_adapter"))
    assert isinstance(adapter, MockAdapter)


def test_load_adapter_errors():
    with pytest.raises(ModuleNotFoundError):
        load_adapter(_settings(LLM_ADAPTER="no_such_adapter_module"))
    # module without build_adapter()
    with pytest.raises(RuntimeError):
        load_adapter(_settings(LLM_ADAPTER="resume_insights.services.skill_matcher"))
    with pytest.raises(RuntimeError):
        load_adapter(_settings(LLM_ADAPTER="http", LLM_HTTP_URL=None))
    with pytest.raises(RuntimeError):
        load_adapter(_settings(LLM_ADAPTER="gemini", LLM_API_KEY=None))


@pytest.mark.asyncio
async def test_mock_adapter_is_deterministic():
    adapter = MockAdapter()
    prompt = "Resume Text:\nPython and React developer"
    first = json.loads(await adapter.generate("assess", prompt))
    second = json.loads(await adapter.generate("assess", prompt))
    assert first == second
    assert 55 <= first["atsScore"] < 95
    assert first["extractedSkills"] == ["Python", "React"]


@pytest.mark.asyncio
async def test_http_adapter_posts_task_and_prompt():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"text": '{"atsScore": 70}'})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        adapter = HttpAdapter("https://llm.example.com/v1", api_key="secret", client=client)
        out = await adapter.generate("assess", "resume prompt")

    assert out == '{"atsScore": 70}'
    assert seen["body"] == {"task": "assess", "prompt": "resume prompt"}
    assert seen["auth"] == "Bearer secret"


@pytest.mark.asyncio
async def test_http_adapter_returns_raw_body_without_text_field():
    transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"atsScore": 64}))
    async with httpx.AsyncClient(transport=transport) as client:
        out = await HttpAdapter("https://llm.example.com/v1", client=client).generate("assess", "p")
    assert json.loads(out) == {"atsScore": 64}


@pytest.mark.asyncio
async def test_http_adapter_does_not_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await HttpAdapter("https://llm.example.com/v1", client=client).generate("assess", "p")
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_gemini_adapter_requests_json():
    generate_content = AsyncMock(return_value=SimpleNamespace(text='{"questions": []}'))
    fake_client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))

    adapter = GeminiAdapter(api_key=None, model="gemini-2.5-flash-lite", client=fake_client)
    out = await adapter.generate("interview_questions", "Generate 3 questions")

    assert out == '{"questions": []}'
    kwargs = generate_content.await_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash-lite"
    assert kwargs["contents"] == "Generate 3 questions"
    assert kwargs["config"].response_mime_type == "application/json"
