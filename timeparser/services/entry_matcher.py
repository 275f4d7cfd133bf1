"""
Stage 2: map the raw text onto structured entries of known tasks.

The backend is told to answer with a bare JSON array, but models like to wrap
it in a ```json fence or add a sentence around it. Both are tolerated:

1. a fenced block tagged ``json`` wins, wherever it is;
2. otherwise the first ``[ {...} ]`` shaped span is taken.

The fallback pattern is a regular expression, not a parser. An object holding
its own array of objects ends the match early and fails to decode.
"""

import json
import logging
import re
from typing import List, Optional

from timeparser.domain.errors import ErrorKind, MatchError
from timeparser.domain.models import ParsedEntry, ProjectGroup
from timeparser.infra.completion.base import TextCompletion
from timeparser.services.prompt_service import PromptRenderer

logger = logging.getLogger(__name__)

FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")
ENTRY_ARRAY_RE = re.compile(r"\[\s*\{[\s\S]*?\}\s*\]")


def extract_entry_block(text: str) -> str:
    """Return the JSON text of the entry array, fenced block first"""
    text = text or ""
    fenced = FENCED_JSON_RE.search(text)
    if fenced:
        return fenced.group(1)

    bare = ENTRY_ARRAY_RE.search(text)
    if bare:
        return bare.group(0)

    raise MatchError(ErrorKind.NO_JSON_BLOCK, "No JSON block found in the completion")


def parse_entries(text: str) -> List[ParsedEntry]:
    """
    Recover the entry array from free-form completion text.

    Only decoding can fail. What decodes is taken as it comes: a lone object
    counts as one entry, array items that are not objects are dropped, and
    field values may be missing or of any JSON type.

    Raises:
        MatchError: NO_JSON_BLOCK or MALFORMED_JSON
    """
    block = extract_entry_block(text)
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise MatchError(ErrorKind.MALFORMED_JSON, f"Entry JSON could not be decoded: {e}") from e

    if isinstance(data, dict):
        data = [data]
    elif not isinstance(data, list):
        logger.warning(f"Entry JSON is a {type(data).__name__}, not an array; no entries read")
        return []

    items = [item for item in data if isinstance(item, dict)]
    if len(items) < len(data):
        logger.warning(f"Dropped {len(data) - len(items)} entry item(s) that are not objects")
    return [ParsedEntry.model_validate(item) for item in items]


class EntryMatcher:
    """
    Sends the filtered catalog plus the raw text and reads back entries.
    """

    def __init__(self, completion: TextCompletion, prompts: Optional[PromptRenderer] = None):
        self.completion = completion
        self.prompts = prompts or PromptRenderer()

    async def match(self, raw_text: str, owner: str, month: str,
                    catalog_context: List[ProjectGroup]) -> List[ParsedEntry]:
        prompt = self.prompts.matching_prompt(raw_text, owner, month, catalog_context)
        logger.debug(f"Matching prompt:\n{prompt}")

        answer = await self.completion.complete(prompt)
        logger.debug(f"Matching completion:\n{answer}")

        return parse_entries(answer)
