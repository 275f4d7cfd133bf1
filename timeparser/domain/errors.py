"""
Error taxonomy.

Each pipeline stage fails with its own exception type; the ``kind`` tells the
caller which parsing rule gave up. Nothing here is retried.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NO_JSON_BLOCK = "no_json_block"
    MALFORMED_JSON = "malformed_json"
    INCOMPLETE_METADATA = "incomplete_metadata"


class TimeParserError(Exception):
    """Base class for all errors raised by timeparser."""


class InputShapeError(TimeParserError):
    """The catalog tree does not have the expected shape."""


class CompletionError(TimeParserError):
    """The generation backend could not be reached or answered garbage."""


class _StageError(TimeParserError):
    stage = ""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        super().__init__(message or f"{self.stage} failed: {kind.value}")


class ExtractionError(_StageError):
    """Stage 1: owner/month could not be recovered from the completion."""
    stage = "metadata extraction"


class MatchError(_StageError):
    """Stage 2: no entry array could be recovered from the completion."""
    stage = "entry matching"
