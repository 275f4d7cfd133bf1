"""
Parse Service - the two-stage pipeline from raw text to entries.

Architecture Decision: explicit state machine
Each run walks

    RECEIVED -> METADATA_PENDING -> METADATA_OK | METADATA_FAILED
             -> CATALOG_FILTERED -> MATCH_PENDING -> MATCH_OK | MATCH_FAILED

and stops at the first failed stage. The run object records every stage it
reached, so a failure says exactly where the pipeline gave up. The backend is
called once per stage and never retried.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from timeparser.domain.errors import (
    CompletionError, ExtractionError, MatchError, TimeParserError
)
from timeparser.domain.models import EntryMetadata, ParsedEntry, ProjectGroup
from timeparser.infra.completion.base import TextCompletion
from timeparser.services.catalog_index import CatalogIndex
from timeparser.services.entry_matcher import EntryMatcher
from timeparser.services.metadata_extractor import MetadataExtractor
from timeparser.services.prompt_service import PromptRenderer

logger = logging.getLogger(__name__)


class ParseStage(str, Enum):
    RECEIVED = "received"
    METADATA_PENDING = "metadata_pending"
    METADATA_OK = "metadata_ok"
    METADATA_FAILED = "metadata_failed"
    CATALOG_FILTERED = "catalog_filtered"
    MATCH_PENDING = "match_pending"
    MATCH_OK = "match_ok"
    MATCH_FAILED = "match_failed"


TRANSITIONS = {
    ParseStage.RECEIVED: {ParseStage.METADATA_PENDING},
    ParseStage.METADATA_PENDING: {ParseStage.METADATA_OK, ParseStage.METADATA_FAILED},
    ParseStage.METADATA_OK: {ParseStage.CATALOG_FILTERED},
    ParseStage.CATALOG_FILTERED: {ParseStage.MATCH_PENDING},
    ParseStage.MATCH_PENDING: {ParseStage.MATCH_OK, ParseStage.MATCH_FAILED},
}

TERMINAL_STAGES = {ParseStage.METADATA_FAILED, ParseStage.MATCH_OK, ParseStage.MATCH_FAILED}


@dataclass
class ParseRun:
    """State and results of one parse request"""
    raw_text: str
    stage: ParseStage = ParseStage.RECEIVED
    history: List[ParseStage] = field(default_factory=lambda: [ParseStage.RECEIVED])
    metadata: Optional[EntryMetadata] = None
    context: List[ProjectGroup] = field(default_factory=list)
    entries: List[ParsedEntry] = field(default_factory=list)
    error: Optional[TimeParserError] = None

    def advance(self, stage: ParseStage) -> None:
        if stage not in TRANSITIONS.get(self.stage, set()):
            raise RuntimeError(f"Illegal parse transition {self.stage.value} -> {stage.value}")
        self.stage = stage
        self.history.append(stage)

    @property
    def finished(self) -> bool:
        return self.stage in TERMINAL_STAGES

    @property
    def succeeded(self) -> bool:
        return self.stage is ParseStage.MATCH_OK


class ParseService:
    """
    Runs metadata extraction, catalog filtering and entry matching in order.

    Holds no per-request state; concurrent runs only share the read-only index.
    """

    def __init__(self, index: CatalogIndex, extractor: MetadataExtractor, matcher: EntryMatcher):
        self.index = index
        self.extractor = extractor
        self.matcher = matcher

    @classmethod
    def from_completion(cls, completion: TextCompletion, index: CatalogIndex,
                        prompts: Optional[PromptRenderer] = None) -> "ParseService":
        prompts = prompts or PromptRenderer()
        return cls(
            index=index,
            extractor=MetadataExtractor(completion, prompts),
            matcher=EntryMatcher(completion, prompts),
        )

    async def run(self, raw_text: str) -> ParseRun:
        """
        Drive one request through the pipeline.

        Stage failures end the run and are kept in ``run.error``; they are not
        raised from here.

        Raises:
            ValueError: raw_text is empty
        """
        if not raw_text or not raw_text.strip():
            raise ValueError("raw_text must not be empty")

        run = ParseRun(raw_text=raw_text)

        run.advance(ParseStage.METADATA_PENDING)
        try:
            run.metadata = await self.extractor.extract(raw_text)
        except (ExtractionError, CompletionError) as e:
            return self._fail(run, ParseStage.METADATA_FAILED, e)
        run.advance(ParseStage.METADATA_OK)
        logger.info(f"Metadata: owner={run.metadata.owner}, month={run.metadata.month}")

        run.context = self.index.context_for(run.metadata.owner, run.metadata.month)
        run.advance(ParseStage.CATALOG_FILTERED)
        if not run.context:
            logger.warning(
                f"No catalog tasks for owner {run.metadata.owner} in {run.metadata.month}"
            )

        run.advance(ParseStage.MATCH_PENDING)
        try:
            run.entries = await self.matcher.match(
                raw_text, run.metadata.owner, run.metadata.month, run.context
            )
        except (MatchError, CompletionError) as e:
            return self._fail(run, ParseStage.MATCH_FAILED, e)
        run.advance(ParseStage.MATCH_OK)
        logger.info(f"Parsed {len(run.entries)} entries")
        return run

    async def parse(self, raw_text: str) -> List[ParsedEntry]:
        """Entries for ``raw_text``; raises the terminal error on failure"""
        run = await self.run(raw_text)
        if run.error is not None:
            raise run.error
        return run.entries

    @staticmethod
    def _fail(run: ParseRun, stage: ParseStage, error: TimeParserError) -> ParseRun:
        run.advance(stage)
        run.error = error
        logger.warning(f"Parse stopped at {stage.value}: {error}")
        return run
