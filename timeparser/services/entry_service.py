"""
Entry Service - persists reviewed entries and reads them back.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List

from timeparser.domain.models import ParsedEntry, SavedEntry
from timeparser.infra.repository import RecordStore

logger = logging.getLogger(__name__)


class EntryService:
    """
    Saves entries exactly as the client sent them; nothing is re-validated.
    """

    def __init__(self, entry_store: RecordStore):
        self.entry_store = entry_store

    async def save(self, entries: Iterable[ParsedEntry]) -> List[SavedEntry]:
        """Persist entries, returning them with id and timestamps"""
        saved = await self.entry_store.insert_many(list(entries))
        logger.info(f"Saved {len(saved)} entries")
        return saved

    async def list_saved(self) -> List[SavedEntry]:
        return await self.entry_store.find({})

    async def saved_by_date(self) -> Dict[str, List[SavedEntry]]:
        """
        Saved entries grouped by date.

        Dates are sorted ascending, entries within a date by start time.
        Entries without a date are grouped under "".
        """
        by_date: Dict[str, List[SavedEntry]] = {}
        for entry in await self.list_saved():
            by_date.setdefault(entry.date or "", []).append(entry)

        return OrderedDict(
            (day, sorted(by_date[day], key=lambda e: e.start or ""))
            for day in sorted(by_date)
        )

    async def clear(self) -> int:
        """Delete all saved entries. Returns count of deleted rows."""
        removed = await self.entry_store.delete_many({})
        logger.info(f"Cleared {removed} saved entries")
        return removed
