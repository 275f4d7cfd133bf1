"""Infrastructure layer - Configuration, persistence and the generation backend"""

from .db import DatabaseEngine, get_engine, init_db
from .repository import RecordStore, SqlRecordStore, CatalogTaskRepository, ParsedEntryRepository

__all__ = [
    "DatabaseEngine", "get_engine", "init_db",
    "RecordStore", "SqlRecordStore", "CatalogTaskRepository", "ParsedEntryRepository",
]
