"""
Factory for creating the configured completion backend.

Architecture Decision: Factory Pattern
Instantiates the correct backend based on settings.
"""

from timeparser.infra.config import LLMSettings
from .base import TextCompletion


def create_completion(llm: LLMSettings) -> TextCompletion:
    """
    Create the completion backend named by ``llm.backend``.

    Returns:
        TextCompletion instance
    """
    if llm.backend == "ollama":
        from .ollama_client import OllamaCompletion
        return OllamaCompletion(base_url=llm.base_url, model=llm.model, timeout=llm.timeout)

    raise ValueError(f"Unsupported completion backend: {llm.backend}")
