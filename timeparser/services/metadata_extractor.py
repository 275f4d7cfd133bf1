"""
Stage 1: infer owner and month from the raw text.
"""

import json
import logging
import re
from typing import Optional

from timeparser.domain.errors import ErrorKind, ExtractionError
from timeparser.domain.models import EntryMetadata
from timeparser.infra.completion.base import TextCompletion
from timeparser.services.prompt_service import PromptRenderer

logger = logging.getLogger(__name__)

# Smallest brace-delimited span; the metadata object has no nesting
JSON_OBJECT_RE = re.compile(r"\{[\s\S]*?\}")


def parse_metadata(text: str) -> EntryMetadata:
    """
    Recover ``{owner, month}`` from free-form completion text.

    Raises:
        ExtractionError: NO_JSON_BLOCK, MALFORMED_JSON or INCOMPLETE_METADATA
    """
    match = JSON_OBJECT_RE.search(text or "")
    if not match:
        raise ExtractionError(ErrorKind.NO_JSON_BLOCK, "No JSON object found in the completion")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ExtractionError(
            ErrorKind.MALFORMED_JSON, f"Metadata JSON could not be decoded: {e}"
        ) from e

    owner = data.get("owner")
    month = data.get("month")
    if not _present(owner) or not _present(month):
        raise ExtractionError(
            ErrorKind.INCOMPLETE_METADATA,
            f"Incomplete metadata: owner={owner!r}, month={month!r}"
        )
    return EntryMetadata(owner=owner, month=month)


def _present(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


class MetadataExtractor:
    """
    Asks the backend for the owner's initials and the YYYY-MM month.
    """

    def __init__(self, completion: TextCompletion, prompts: Optional[PromptRenderer] = None):
        self.completion = completion
        self.prompts = prompts or PromptRenderer()

    async def extract(self, raw_text: str) -> EntryMetadata:
        prompt = self.prompts.metadata_prompt(raw_text)
        logger.debug(f"Metadata prompt:\n{prompt}")

        answer = await self.completion.complete(prompt)
        logger.debug(f"Metadata completion:\n{answer}")

        return parse_metadata(answer)
