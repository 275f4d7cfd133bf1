"""
Script to parse a free-text time tracking file without the HTTP server.
"""

import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timeparser.domain.errors import TimeParserError
from timeparser.infra.completion import create_completion
from timeparser.infra.config import get_settings
from timeparser.services.catalog_index import CatalogIndex
from timeparser.services.catalog_service import CatalogFlattener, load_catalog
from timeparser.services.parse_service import ParseService


async def main():
    if len(sys.argv) < 2:
        print("Usage: python parse_text.py <entries.txt>")
        sys.exit(1)

    text_path = Path(sys.argv[1])
    if not text_path.exists():
        print(f"Error: Input file '{text_path}' not found.")
        sys.exit(1)

    settings = get_settings()
    print(f"Loading catalog from {settings.catalog_path}...", file=sys.stderr)
    catalog = load_catalog(settings.catalog_path)
    index = CatalogIndex(CatalogFlattener().flatten(catalog.projects))

    completion = create_completion(settings.llm)
    service = ParseService.from_completion(completion, index)
    try:
        run = await service.run(text_path.read_text(encoding='utf-8'))
    finally:
        await completion.aclose()

    print(f"Stages: {' -> '.join(s.value for s in run.history)}", file=sys.stderr)
    if run.error is not None:
        kind = getattr(run.error, "kind", None)
        print(f"Error ({kind.value if kind else 'backend'}): {run.error}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps([e.model_dump() for e in run.entries], indent=2, ensure_ascii=False))


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except TimeParserError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
