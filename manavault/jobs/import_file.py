"""
Import a CSV export or decklist file into a collection.

Usage:
    python -m manavault.jobs.import_file <user_id> <collection_id> <path>

The file kind is detected from its content. Cards the catalog cannot match
are logged and left out; everything else is aggregated and imported.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from manavault.db.database import async_session_factory, init_db
from manavault.db.operations import get_collection
from manavault.models.import_item import ItemStatus
from manavault.services.catalog_client import ScryfallClient, create_scryfall_client
from manavault.services.catalog_resolver import CatalogResolver
from manavault.services.import_service import ImportOutcome, ImportService

logger = logging.getLogger(__name__)


class ImportJobError(Exception):
    """The file or destination collection cannot be imported."""


def _log_progress(fraction: float) -> None:
    logger.info("Resolved %.0f%% of cards", fraction * 100)


async def run_import(
    user_id: str,
    collection_id: int,
    path: Path,
    client: ScryfallClient | None = None,
) -> ImportOutcome:
    """
    Parse, resolve and import one file.

    Raises:
        ImportJobError: If the collection is missing or owned by someone
            else, or the CSV header needs an explicit column mapping
    """
    text = path.read_text(encoding="utf-8")
    owns_client = client is None
    catalog = client or create_scryfall_client()

    try:
        service = ImportService(CatalogResolver(catalog))
        preview = service.preview(text)
        if preview.requires_mapping:
            raise ImportJobError(
                f"Unrecognized CSV header {preview.headers}; map columns through the API"
            )
        logger.info("Parsed %d %s item(s) from %s", len(preview.items), preview.kind.value, path)

        async with async_session_factory() as session:
            collection = await get_collection(session, collection_id)
            if collection is None or collection.user_id != user_id:
                raise ImportJobError(f"Collection {collection_id} not found for user {user_id}")

            summary = await service.resolve(preview.items, on_progress=_log_progress)
            for item in preview.items:
                if item.status == ItemStatus.UNMATCHED:
                    logger.warning("Unmatched: %s (line item %d)", item.name, item.raw_index)
            logger.info("Matched %d, unmatched %d", summary.matched, summary.unmatched)

            return await service.commit(session, collection_id, preview.items)
    finally:
        if owns_client:
            await catalog.aclose()


async def run(user_id: str, collection_id: int, path: Path) -> ImportOutcome:
    await init_db()
    outcome = await run_import(user_id, collection_id, path)
    logger.info("Imported %d entries (%d failed)", outcome.imported, outcome.failed)
    return outcome


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = argparse.ArgumentParser(description="Import a card file into a collection")
    parser.add_argument("user_id")
    parser.add_argument("collection_id", type=int)
    parser.add_argument("path", type=Path)
    args = parser.parse_args(argv)

    asyncio.run(run(args.user_id, args.collection_id, args.path))


if __name__ == "__main__":
    main()
