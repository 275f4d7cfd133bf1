"""Domain layer - Pure business entities and errors"""

from .models import (
    Catalog,
    CatalogNode,
    CatalogProject,
    EntryMetadata,
    FlatTaskRecord,
    ParsedEntry,
    ProjectGroup,
    SavedEntry,
    TaskRef,
    TraversalContext,
)
from .errors import (
    CompletionError,
    ErrorKind,
    ExtractionError,
    InputShapeError,
    MatchError,
    TimeParserError,
)

__all__ = [
    "Catalog", "CatalogNode", "CatalogProject", "EntryMetadata", "FlatTaskRecord",
    "ParsedEntry", "ProjectGroup", "SavedEntry", "TaskRef", "TraversalContext",
    "CompletionError", "ErrorKind", "ExtractionError", "InputShapeError",
    "MatchError", "TimeParserError",
]
