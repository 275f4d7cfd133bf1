"""
Script to (re)import the task catalog into the database and show what it holds.

Usage: python import_catalog.py [catalog.json] [--owner XX --month YYYY-MM]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timeparser.domain.errors import InputShapeError
from timeparser.infra.config import get_settings
from timeparser.infra.db import get_engine
from timeparser.infra.repository import CatalogTaskRepository
from timeparser.services.catalog_index import CatalogIndex
from timeparser.services.catalog_service import CatalogImportService


async def main():
    parser = argparse.ArgumentParser(description="Import the task catalog")
    parser.add_argument("catalog", nargs="?", help="Catalog JSON (default: configured catalog_path)")
    parser.add_argument("--owner", help="Show the grouped context for this owner")
    parser.add_argument("--month", help="Month (YYYY-MM) for --owner")
    args = parser.parse_args()

    settings = get_settings()
    catalog_path = Path(args.catalog) if args.catalog else settings.catalog_path
    if not catalog_path.exists():
        print(f"Error: Catalog file '{catalog_path}' not found.")
        sys.exit(1)

    engine = get_engine(settings.get_db_url())
    await engine.create_tables()

    index = CatalogIndex()
    importer = CatalogImportService(index, CatalogTaskRepository(engine=engine))
    try:
        count = await importer.import_file(catalog_path)
    except InputShapeError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()

    print(f"Imported {count} tasks from {catalog_path.absolute()}")

    if args.owner and args.month:
        groups = index.context_for(args.owner, args.month)
        print(json.dumps([g.model_dump(by_alias=True) for g in groups], indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
