"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
The catalog arrives as loosely shaped JSON and the generation backend answers
with free-form text. Pydantic checks shapes at those two edges and gives us the
camelCase wire format (``projectId``, ``taskName``) the catalog context and the
HTTP surface use, while the Python side stays snake_case.
"""

import json
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CatalogNode(BaseModel):
    """
    One node of the nested task catalog.

    A node is a leaf iff ``subtasks`` is absent. Leaves are concrete tasks,
    internal nodes are grouping labels (usually a month such as "April'25").
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    subtasks: Optional[List["CatalogNode"]] = None

    @property
    def is_leaf(self) -> bool:
        return self.subtasks is None


class CatalogProject(BaseModel):
    """A top-level project of the catalog source."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    name: str
    tasks: List[CatalogNode] = Field(..., alias="Tasks")


class Catalog(BaseModel):
    """The static catalog document: ``{"projects": [...]}``"""
    model_config = ConfigDict(extra="ignore")

    projects: List[CatalogProject]


class TraversalContext(BaseModel):
    """
    Context handed down the catalog tree.

    Frozen: a branch derives its own copy with ``model_copy(update=...)``, so a
    month resolved inside one subtree can never leak into a sibling.
    """
    model_config = ConfigDict(frozen=True)

    project_id: Optional[int] = None
    project_name: Optional[str] = None
    current_month: Optional[str] = None  # YYYY-MM


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FlatTaskRecord(_CamelModel):
    """One catalog leaf, indexed by owner and month."""

    project_id: Optional[int] = None
    project_name: Optional[str] = None
    task_name: str
    owner: Optional[str] = None  # two-letter code from a leading "(XX)"
    month: Optional[str] = None


class TaskRef(_CamelModel):
    """A task as listed inside a project group of the catalog context."""

    task_name: str
    owner: Optional[str] = None
    month: Optional[str] = None


class ProjectGroup(_CamelModel):
    """Tasks of one project, as embedded in the matching prompt."""

    project_id: Optional[int] = None
    project_name: Optional[str] = None
    tasks: List[TaskRef] = Field(default_factory=list)


class EntryMetadata(BaseModel):
    """Owner and month inferred from a raw time-tracking text."""

    owner: str
    month: str


class ParsedEntry(BaseModel):
    """
    A structured time entry as returned by the matching stage.

    Every field may be missing: the backend output is taken best-effort and
    never rejected. Values that are not strings are kept as their JSON text
    (``false``, ``["a", "b"]``), so nothing the backend said is lost. Entries
    are never modified after creation, edits happen on the client before a
    save request.
    """
    model_config = ConfigDict(
        frozen=True,
        from_attributes=True,
        extra="ignore",
    )

    date: Optional[str] = None         # YYYY-MM-DD
    start: Optional[str] = None        # HH:MM
    end: Optional[str] = None          # HH:MM
    task: Optional[str] = None         # official task name or None
    description: Optional[str] = None
    owner: Optional[str] = None
    project: Optional[str] = None      # official project name or None

    @field_validator("date", "start", "end", "task", "description", "owner", "project",
                     mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=str)


class SavedEntry(ParsedEntry):
    """A parsed entry after it has been persisted."""

    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
