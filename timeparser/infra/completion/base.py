"""
Base class for text-generation backends.

Architecture Decision: Strategy Pattern + Factory Pattern
The pipeline sees the model as an opaque function, prompt in and completion
out. Backends implement this interface; tests substitute fixed responses.
"""

from abc import ABC, abstractmethod


class TextCompletion(ABC):
    """
    Abstract base class for a single-shot, non-streaming completion.
    """

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the completion text for ``prompt``"""
        raise NotImplementedError("Subclasses must implement complete")

    async def is_available(self) -> bool:
        """Whether the backend currently answers; defaults to True"""
        return True

    async def aclose(self) -> None:
        """Release held connections"""
        return None
