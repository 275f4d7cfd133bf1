"""
Tests for the Ollama completion backend against a mocked transport.
"""

import json

import httpx
import pytest

from timeparser.domain.errors import CompletionError
from timeparser.infra.completion.ollama_client import OllamaCompletion


def _backend(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OllamaCompletion(base_url="http://ollama.test", model="gemma3:4b", client=client)


@pytest.mark.asyncio
async def test_generate_request_and_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"model": "gemma3:4b", "response": "{\"owner\": \"SK\"}", "done": True})

    backend = _backend(handler)
    text = await backend.complete("Who wrote this?")
    await backend.aclose()

    assert text == '{"owner": "SK"}'
    assert seen["url"] == "http://ollama.test/api/generate"
    assert seen["body"] == {"model": "gemma3:4b", "prompt": "Who wrote this?", "stream": False}


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(500, text="model not loaded"),
    httpx.Response(200, json={"done": True}),
    httpx.Response(200, text="not json"),
])
async def test_bad_answers_raise(response):
    backend = _backend(lambda request: response)

    with pytest.raises(CompletionError):
        await backend.complete("prompt")


@pytest.mark.asyncio
async def test_unreachable_backend():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    backend = _backend(handler)

    with pytest.raises(CompletionError):
        await backend.complete("prompt")
    assert await backend.is_available() is False


@pytest.mark.asyncio
async def test_is_available():
    backend = _backend(lambda request: httpx.Response(200, json={"models": []}))
    assert await backend.is_available() is True
