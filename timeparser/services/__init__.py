"""Services layer - Business logic"""

from .catalog_index import CatalogIndex
from .catalog_service import CatalogFlattener, CatalogImportService
from .prompt_service import PromptRenderer
from .metadata_extractor import MetadataExtractor
from .entry_matcher import EntryMatcher
from .parse_service import ParseService, ParseRun, ParseStage
from .entry_service import EntryService

__all__ = [
    "CatalogIndex", "CatalogFlattener", "CatalogImportService", "PromptRenderer",
    "MetadataExtractor", "EntryMatcher", "ParseService", "ParseRun", "ParseStage",
    "EntryService",
]
