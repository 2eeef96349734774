"""
Import orchestration: parse -> resolve -> aggregate -> persist.

Preview and resolution work on ParsedLineItem lists the caller holds on to
between steps (the HTTP API round-trips them as JSON). Commit aggregates
the matched subset and writes it in chunks of MAX_BULK_ENTRIES, committing
each chunk on its own: a failing chunk is counted as failed and leaves the
chunks before it in place.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from manavault.config import MAX_BULK_ENTRIES, settings
from manavault.db.operations import bulk_create_entries, entry_to_model
from manavault.models.collection import CollectionEntry, DeckType
from manavault.models.import_item import ItemStatus, ParsedLineItem, Section
from manavault.parsers.csv_import import ColumnMapping, CsvFormat, parse_csv_text
from manavault.parsers.decklist import is_decklist_text, parse_decklist_text
from manavault.services.aggregator import aggregate_line_items
from manavault.services.catalog_resolver import (
    CatalogResolver,
    ProgressCallback,
    ResolveSummary,
    chunked,
)

logger = logging.getLogger(__name__)


class ImportKind(str, Enum):
    """Shape of pasted or uploaded import text."""

    CSV = "csv"
    DECKLIST = "decklist"


def detect_import_kind(text: str) -> ImportKind:
    """Decklist when the text looks like one, CSV otherwise."""
    return ImportKind.DECKLIST if is_decklist_text(text) else ImportKind.CSV


@dataclass
class ImportPreview:
    """Parsed items plus what the parser learned about the input."""

    kind: ImportKind
    items: list[ParsedLineItem] = field(default_factory=list)
    csv_format: CsvFormat | None = None
    headers: list[str] = field(default_factory=list)
    requires_mapping: bool = False
    sections: list[Section] = field(default_factory=list)
    suggested_deck_type: DeckType | None = None


@dataclass
class ImportOutcome:
    """Result of committing an import."""

    imported: int = 0
    failed: int = 0
    entries: list[CollectionEntry] = field(default_factory=list)


class ImportService:
    """
    Runs the import pipeline for one destination collection at a time.

    Args:
        resolver: Catalog resolver (shares the process-wide rate-limit gate)
        bulk_chunk_delay: Pause between bulk-create chunks
        sleep: Async sleep (injectable for tests)
    """

    def __init__(
        self,
        resolver: CatalogResolver,
        bulk_chunk_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._resolver = resolver
        self.bulk_chunk_delay = (
            settings.bulk_chunk_delay if bulk_chunk_delay is None else bulk_chunk_delay
        )
        self._sleep = sleep

    def preview_csv(self, text: str, mapping: ColumnMapping | None = None) -> ImportPreview:
        result = parse_csv_text(text, mapping)
        return ImportPreview(
            kind=ImportKind.CSV,
            items=result.items,
            csv_format=result.format,
            headers=result.headers,
            requires_mapping=result.requires_mapping,
        )

    def preview_decklist(self, text: str) -> ImportPreview:
        """
        Parse a decklist. Maybeboard items start out skipped.

        A Commander section suggests the COMMANDER deck type.
        """
        result = parse_decklist_text(text)
        for item in result.all_cards:
            if item.section == Section.MAYBEBOARD:
                item.status = ItemStatus.SKIPPED

        return ImportPreview(
            kind=ImportKind.DECKLIST,
            items=result.all_cards,
            sections=[section.name for section in result.sections],
            suggested_deck_type=(
                DeckType.COMMANDER if result.has_section(Section.COMMANDER) else None
            ),
        )

    def preview(self, text: str, mapping: ColumnMapping | None = None) -> ImportPreview:
        """Preview with the kind detected from the text; a mapping forces CSV."""
        if mapping is None and detect_import_kind(text) == ImportKind.DECKLIST:
            return self.preview_decklist(text)
        return self.preview_csv(text, mapping)

    async def resolve(
        self,
        items: Sequence[ParsedLineItem],
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ResolveSummary:
        return await self._resolver.resolve_items(items, cancel_event, on_progress)

    @staticmethod
    def skip(items: Sequence[ParsedLineItem], raw_index: int) -> ParsedLineItem:
        """
        Mark the item with the given raw_index as skipped.

        Raises:
            KeyError: If no item has that raw_index
            ValueError: If the item is already matched
        """
        for item in items:
            if item.raw_index == raw_index:
                item.skip()
                return item
        raise KeyError(raw_index)

    async def commit(
        self,
        session: AsyncSession,
        collection_id: int,
        items: Sequence[ParsedLineItem],
    ) -> ImportOutcome:
        """
        Aggregate matched items and persist them.

        Commits the session once per chunk.
        """
        aggregated = aggregate_line_items(items)
        outcome = ImportOutcome()
        if not aggregated:
            return outcome

        chunks = chunked(aggregated, MAX_BULK_ENTRIES)
        for number, chunk in enumerate(chunks):
            if number > 0 and self.bulk_chunk_delay > 0:
                await self._sleep(self.bulk_chunk_delay)
            try:
                rows = await bulk_create_entries(session, collection_id, chunk)
                await session.commit()
            except (SQLAlchemyError, ValueError) as e:
                await session.rollback()
                logger.warning(
                    "Import chunk %d/%d into collection %d failed: %s",
                    number + 1,
                    len(chunks),
                    collection_id,
                    e,
                )
                outcome.failed += len(chunk)
                continue

            outcome.imported += len(rows)
            outcome.entries.extend(entry_to_model(row) for row in rows)

        logger.info(
            "Imported %d entries into collection %d (%d failed)",
            outcome.imported,
            collection_id,
            outcome.failed,
        )
        return outcome
