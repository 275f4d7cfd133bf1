"""
HTTP surface.

Thin layer over the services: parse raw text, save reviewed entries, list
what was saved. The catalog is imported once when the app starts.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from timeparser.domain.errors import CompletionError, ExtractionError, MatchError
from timeparser.domain.models import ParsedEntry
from timeparser.infra.completion import TextCompletion, create_completion
from timeparser.infra.config import Settings, get_settings
from timeparser.infra.db import DatabaseEngine
from timeparser.infra.repository import CatalogTaskRepository, ParsedEntryRepository
from timeparser.services.catalog_index import CatalogIndex
from timeparser.services.catalog_service import CatalogImportService
from timeparser.services.entry_service import EntryService
from timeparser.services.parse_service import ParseService

logger = logging.getLogger(__name__)


class ParseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    raw_text: Optional[str] = Field(default=None, alias="rawText")


class SaveRequest(BaseModel):
    entries: Optional[List[ParsedEntry]] = None


def _error(status_code: int, message: str, kind: Optional[str] = None) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": message, "kind": kind})


def create_app(settings: Optional[Settings] = None,
               completion: Optional[TextCompletion] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use instead of the global ones
        completion: Backend to use instead of the configured one (tests)
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = DatabaseEngine(settings.get_db_url())
        await db.create_tables()

        index = CatalogIndex()
        entries = EntryService(ParsedEntryRepository(engine=db))
        if settings.clear_entries_on_startup:
            await entries.clear()
        importer = CatalogImportService(index, CatalogTaskRepository(engine=db))
        await importer.import_file(settings.catalog_path)

        backend = completion or create_completion(settings.llm)
        app.state.index = index
        app.state.completion = backend
        app.state.parser = ParseService.from_completion(backend, index)
        app.state.entries = entries
        try:
            yield
        finally:
            if completion is None:
                await backend.aclose()
            await db.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/parse")
    async def parse(body: ParseRequest, request: Request):
        if not body.raw_text or not body.raw_text.strip():
            raise _error(400, "Missing rawText")

        try:
            entries = await request.app.state.parser.parse(body.raw_text)
        except ExtractionError as e:
            raise _error(400, str(e), e.kind.value)
        except MatchError as e:
            raise _error(500, str(e), e.kind.value)
        except CompletionError as e:
            raise _error(502, str(e))

        return {"parsed": [entry.model_dump() for entry in entries]}

    @app.post("/api/save", status_code=201)
    async def save(body: SaveRequest, request: Request):
        if body.entries is None:
            raise _error(400, "Invalid or missing entries array")

        try:
            saved = await request.app.state.entries.save(body.entries)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save parsed entries: {e}")
            raise _error(500, "Failed to save entries")

        return {
            "message": "Entries saved successfully",
            "saved": [entry.model_dump(mode="json") for entry in saved],
        }

    @app.get("/api/saved")
    async def saved(request: Request):
        try:
            entries = await request.app.state.entries.list_saved()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch saved entries: {e}")
            raise _error(500, "Failed to fetch saved entries")
        return [entry.model_dump(mode="json") for entry in entries]

    @app.get("/api/saved/by-date")
    async def saved_by_date(request: Request):
        try:
            grouped = await request.app.state.entries.saved_by_date()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch saved entries: {e}")
            raise _error(500, "Failed to fetch saved entries")
        return {
            day: [entry.model_dump(mode="json") for entry in items]
            for day, items in grouped.items()
        }

    @app.get("/api/health")
    async def health(request: Request):
        return {
            "backend_available": await request.app.state.completion.is_available(),
            "catalog_tasks": len(request.app.state.index),
        }

    return app
