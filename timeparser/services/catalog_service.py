"""
Catalog Service - flattens the nested project/task tree and loads it.

The catalog is a static JSON document. Internal nodes group tasks, usually by
month ("April'25"); leaves are the tasks time is booked on, with the owner
encoded as a leading "(XX)" in the name.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from timeparser.domain.errors import InputShapeError
from timeparser.domain.models import (
    Catalog, CatalogNode, CatalogProject, FlatTaskRecord, TraversalContext
)
from timeparser.infra.repository import RecordStore
from timeparser.services.catalog_index import CatalogIndex

logger = logging.getLogger(__name__)

# Month names as they appear in the catalog
MONTHS = {
    "Januar": "01", "Februar": "02", "März": "03", "April": "04",
    "Mai": "05", "Juni": "06", "Juli": "07", "August": "08",
    "September": "09", "Oktober": "10", "November": "11", "Dezember": "12",
}

# "April'25", "April25" -> ("April", "25"); a third digit means it is not a year marker
MONTH_TOKEN_RE = re.compile(r"(" + "|".join(MONTHS) + r")'?(\d{2})(?!\d)")
OWNER_RE = re.compile(r"^\((\w{2})\)")


def extract_month(text: str) -> Optional[str]:
    """Return the first month token in ``text`` as YYYY-MM, or None"""
    match = MONTH_TOKEN_RE.search(text)
    if not match:
        return None
    name, year = match.groups()
    return f"20{year}-{MONTHS[name]}"


def extract_owner(name: str) -> Optional[str]:
    """Return the two-letter owner code of "(SK) - ..." style names, or None"""
    match = OWNER_RE.match(name)
    return match.group(1) if match else None


def load_catalog(path: Path) -> Catalog:
    """Read and validate the catalog JSON document"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InputShapeError(f"Catalog {path} is not valid JSON: {e}") from e

    try:
        return Catalog.model_validate(data)
    except ValidationError as e:
        raise InputShapeError(f"Catalog {path} has an unexpected shape: {e}") from e


class CatalogFlattener:
    """
    Turns the project/task tree into one FlatTaskRecord per leaf.

    The month is resolved top-down: a token on a node applies to that node and
    its whole subtree, never to its siblings.
    """

    def flatten(self, projects: Sequence[Any]) -> List[FlatTaskRecord]:
        """
        Flatten all projects.

        Args:
            projects: CatalogProject instances or raw ``{id, name, Tasks}`` dicts

        Returns:
            Records in depth-first, document order
        """
        records: List[FlatTaskRecord] = []
        for project in self._as_projects(projects):
            context = TraversalContext(project_id=project.id, project_name=project.name)
            for task in project.tasks:
                self._visit(task, context, records)
        return records

    @staticmethod
    def _as_projects(projects: Sequence[Any]) -> List[CatalogProject]:
        try:
            return [
                p if isinstance(p, CatalogProject) else CatalogProject.model_validate(p)
                for p in projects
            ]
        except ValidationError as e:
            raise InputShapeError(f"Malformed catalog project: {e}") from e

    def _visit(self, node: CatalogNode, context: TraversalContext,
               records: List[FlatTaskRecord]) -> None:
        if node.name:
            month = extract_month(node.name)
            if month:
                context = context.model_copy(update={"current_month": month})

        if not node.is_leaf:
            # An empty subtasks list is a branch without leaves: nothing to emit
            for child in node.subtasks:
                self._visit(child, context, records)
            return

        if not isinstance(node.name, str):
            raise InputShapeError(
                f"Leaf task without a name in project {context.project_name!r}"
            )

        records.append(FlatTaskRecord(
            project_id=context.project_id,
            project_name=context.project_name,
            task_name=node.name,
            owner=extract_owner(node.name),
            month=context.current_month,
        ))


class CatalogImportService:
    """
    Rebuilds the task store and the in-memory index from the catalog source.

    Old records are deleted, never merged.
    """

    def __init__(self, index: CatalogIndex, task_store: RecordStore,
                 flattener: Optional[CatalogFlattener] = None):
        self.index = index
        self.task_store = task_store
        self.flattener = flattener or CatalogFlattener()

    async def import_file(self, path: Path) -> int:
        """Import the catalog JSON at ``path``; returns the number of tasks"""
        catalog = load_catalog(path)
        count = await self.import_projects(catalog.projects)
        logger.info(f"Imported {count} tasks from {path}")
        return count

    async def import_projects(self, projects: Sequence[Any]) -> int:
        # Flatten first so a malformed tree leaves the store untouched
        records = self.flattener.flatten(projects)

        removed = await self.task_store.delete_many({})
        logger.debug(f"Removed {removed} previously imported tasks")
        await self.task_store.insert_many(records)

        self.index.load(await self.task_store.find({}))
        return len(records)
