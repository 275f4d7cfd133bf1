"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
The pipeline only relies on set-oriented find / insert-many / delete-many
operations. Hiding them behind ``RecordStore`` makes it easy to:
- Switch database implementations
- Mock data for testing
- Change data sources (local DB to a document store)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from timeparser.domain.models import FlatTaskRecord, SavedEntry
from timeparser.infra.db import Base, TaskModel, ParsedEntryModel, DatabaseEngine, get_engine


class RecordStore(ABC):
    """
    Set-oriented persistence capability.

    ``filter`` maps field names to values; an empty or missing filter matches
    every record. ``find`` returns records in insertion order.
    """

    @abstractmethod
    async def find(self, filter: Optional[Mapping[str, Any]] = None) -> List[BaseModel]:
        ...

    @abstractmethod
    async def insert_many(self, records: Iterable[Any]) -> List[BaseModel]:
        ...

    @abstractmethod
    async def delete_many(self, filter: Optional[Mapping[str, Any]] = None) -> int:
        ...


class SqlRecordStore(RecordStore):
    """
    RecordStore backed by one SQLAlchemy table.

    Subclasses name the ORM ``model``, the pydantic ``schema`` returned from
    reads, and the ``fields`` copied from incoming records on insert.
    """

    model: Type[Base]
    schema: Type[BaseModel]
    fields: tuple = ()

    def __init__(self, session: Optional[AsyncSession] = None,
                 engine: Optional[DatabaseEngine] = None):
        self.session = session
        self.engine = engine

    async def _get_session(self) -> AsyncSession:
        """Get session - injected, from the given engine, or a new one"""
        if self.session:
            return self.session
        engine = self.engine or get_engine()
        return engine.get_session()

    def _where(self, filter: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        criteria = dict(filter or {})
        columns = set(self.model.__table__.columns.keys())
        unknown = [key for key in criteria if key not in columns]
        if unknown:
            raise ValueError(f"Unknown filter field(s) for {self.model.__tablename__}: {unknown}")
        return criteria

    def _to_row(self, record: Any) -> Dict[str, Any]:
        data = record.model_dump() if isinstance(record, BaseModel) else dict(record)
        return {name: data.get(name) for name in self.fields}

    async def find(self, filter: Optional[Mapping[str, Any]] = None) -> List[BaseModel]:
        """Get all records matching the filter"""
        criteria = self._where(filter)
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(self.model).filter_by(**criteria).order_by(self.model.id)
            )
            return [self.schema.model_validate(m) for m in result.scalars().all()]

    async def insert_many(self, records: Iterable[Any]) -> List[BaseModel]:
        """Insert records in order, returning them as stored"""
        session = await self._get_session()
        async with session:
            models = [self.model(**self._to_row(r)) for r in records]
            session.add_all(models)
            await session.commit()
            for model in models:
                await session.refresh(model)
            return [self.schema.model_validate(m) for m in models]

    async def delete_many(self, filter: Optional[Mapping[str, Any]] = None) -> int:
        """Delete matching records. Returns count of deleted rows."""
        criteria = self._where(filter)
        session = await self._get_session()
        async with session:
            result = await session.execute(delete(self.model).filter_by(**criteria))
            await session.commit()
            return result.rowcount


class CatalogTaskRepository(SqlRecordStore):
    """
    Flattened catalog tasks.

    Rebuilt wholesale at startup, read-only afterwards.
    """
    model = TaskModel
    schema = FlatTaskRecord
    fields = ("project_id", "project_name", "task_name", "owner", "month")


class ParsedEntryRepository(SqlRecordStore):
    """Saved time entries, stored verbatim."""
    model = ParsedEntryModel
    schema = SavedEntry
    fields = ("date", "start", "end", "task", "description", "owner", "project")
