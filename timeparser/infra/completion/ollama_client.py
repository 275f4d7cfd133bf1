"""
Ollama completion backend.

Uses /api/generate with ``stream: false``: one request, one JSON body with a
``response`` string.
"""

import logging
from typing import Optional

import httpx

from timeparser.domain.errors import CompletionError
from .base import TextCompletion

logger = logging.getLogger(__name__)


class OllamaCompletion(TextCompletion):
    """
    Talks to a local Ollama server.

    There is no retry and, unless ``timeout`` is given, no read timeout: a hung
    model blocks the request until the caller gives up.
    """

    def __init__(self, base_url: str = "http://127.0.0.1:11434", model: str = "gemma3:4b",
                 timeout: Optional[float] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=5.0))

    async def complete(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
        }
        try:
            response = await self._client.post(f"{self.base_url}/api/generate", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise CompletionError(
                f"Ollama returned HTTP {exc.response.status_code} for model {self.model}"
            ) from exc
        except httpx.TransportError as exc:
            raise CompletionError(f"Ollama is not reachable at {self.base_url}: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise CompletionError("Ollama returned a non-JSON body") from exc

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise CompletionError("Ollama response has no 'response' text")

        logger.debug(f"Completion from {self.model}: {text}")
        return text

    async def is_available(self) -> bool:
        try:
            r = await self._client.get(f"{self.base_url}/api/tags", timeout=2.0)
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def aclose(self) -> None:
        await self._client.aclose()
