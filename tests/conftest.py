"""
Pytest configuration and fixtures.
"""

import sys
from pathlib import Path
from typing import List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from timeparser.infra.completion.base import TextCompletion
from timeparser.infra.db import Base

SAMPLE_CATALOG = Path(__file__).parent.parent / "config" / "catalog.json"


class ScriptedCompletion(TextCompletion):
    """Answers prompts with canned completions, in order, and records the prompts."""

    def __init__(self, *responses: str):
        self.responses: List[str] = list(responses)
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("Unexpected completion request")
        return self.responses.pop(0)


@pytest.fixture
def completion():
    """An empty scripted backend; queue answers via ``completion.responses``"""
    return ScriptedCompletion()


@pytest.fixture
def sample_catalog_path() -> Path:
    return SAMPLE_CATALOG


@pytest.fixture
def projects():
    """A small two-project catalog in the raw source shape"""
    return [
        {
            "id": 1258,
            "name": "1258 - PDM - Produkt - Anwendungen - 2025",
            "Tasks": [
                {"name": "April'25", "subtasks": [
                    {"name": "(SK) - BuP - April'25"},
                    {"name": "(TS) - BD - April'25"},
                ]},
                {"name": "Mai'25", "subtasks": [
                    {"name": "(SK) - BuP - Mai'25"},
                ]},
            ],
        },
        {
            "id": 1260,
            "name": "1260 - PDM - Produkt - Horizont - 2025",
            "Tasks": [
                {"name": "April'25", "subtasks": [
                    {"name": "(SK) - BuP - April'25"},
                ]},
            ],
        },
    ]


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create a new session for a test"""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session
