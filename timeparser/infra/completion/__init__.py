"""Text-generation backends"""

from .base import TextCompletion
from .factory import create_completion

__all__ = ["TextCompletion", "create_completion"]
