"""
Catalog resolution for parsed line items.

Two access patterns share one chunked loop over /cards/collection:

- resolve_items: import path. Degrades gracefully; a failed chunk marks its
  items unmatched and the loop moves on. Never raises for catalog failures.
- fetch_cards_by_id: statistics/validation/export path. Strict; a failed
  chunk aborts the whole fetch with a KnownError so the caller can report
  it instead of computing from partial data.

INVARIANTS:
- Chunks run strictly in sequence, at most SCRYFALL_CHUNK_SIZE identifiers each
- Cancellation is checked between chunks, never mid-request
- After resolve_items returns, no item of a started chunk is still pending
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field

import httpx

from manavault.config import SCRYFALL_CHUNK_SIZE, settings
from manavault.models.card import CatalogCard
from manavault.models.failure import CatalogUnavailableError, RateLimitTimeoutError
from manavault.models.import_item import ParsedLineItem, front_face_name
from manavault.services.catalog_client import ScryfallClient

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

# Failures that degrade a resolver chunk to "unmatched" instead of raising
CHUNK_FAILURES = (httpx.HTTPError, ValueError, KeyError, RateLimitTimeoutError)


def chunked(values: Sequence, size: int) -> list[Sequence]:
    """Split a sequence into consecutive slices of at most `size`."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [values[i : i + size] for i in range(0, len(values), size)]


@dataclass
class CatalogIndex:
    """
    Lookup structure over one batch of catalog cards.

    Printings are keyed by (set code, collector number); names by the
    lowercased full name and each lowercased face name, alone and paired
    with the set code.
    """

    by_printing: dict[tuple[str, str], CatalogCard] = field(default_factory=dict)
    by_name: dict[str, CatalogCard] = field(default_factory=dict)
    by_name_set: dict[tuple[str, str], CatalogCard] = field(default_factory=dict)

    @classmethod
    def from_cards(cls, cards: Iterable[CatalogCard]) -> "CatalogIndex":
        index = cls()
        for card in cards:
            index.add(card)
        return index

    def add(self, card: CatalogCard) -> None:
        # First card seen for a key wins
        if card.set_code and card.collector_number:
            key = (card.set_code.lower(), card.collector_number.lower())
            self.by_printing.setdefault(key, card)
        set_code = card.set_code.lower()
        for name in (card.name, *card.face_names):
            self.by_name.setdefault(name.lower(), card)
            if set_code:
                self.by_name_set.setdefault((name.lower(), set_code), card)

    def match(self, item: ParsedLineItem) -> CatalogCard | None:
        """Exact printing first, then name within the set, then name alone."""
        if item.set_code and item.collector_number:
            card = self.by_printing.get((item.set_code.lower(), item.collector_number.lower()))
            if card is not None:
                return card

        name = item.name.strip().lower()
        if item.set_code:
            set_code = item.set_code.lower()
            card = self.by_name_set.get((name, set_code))
            if card is None:
                card = self.by_name_set.get((front_face_name(name), set_code))
            if card is not None:
                return card

        card = self.by_name.get(name)
        if card is None:
            card = self.by_name.get(front_face_name(name))
        return card


@dataclass
class ResolveSummary:
    """Outcome counts of one resolve_items pass."""

    matched: int = 0
    unmatched: int = 0
    failed_chunks: int = 0
    cancelled: bool = False
    cards: dict[str, CatalogCard] = field(default_factory=dict)


class CatalogResolver:
    """
    Resolves line items and card IDs against the catalog in sequential chunks.

    Args:
        client: Catalog client (all calls go through its rate-limit gate)
        chunk_size: Identifiers per batch request
        chunk_delay: Pause between chunks, in addition to the gate spacing
        sleep: Async sleep (injectable for tests)
    """

    def __init__(
        self,
        client: ScryfallClient,
        chunk_size: int = SCRYFALL_CHUNK_SIZE,
        chunk_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.chunk_size = min(chunk_size, SCRYFALL_CHUNK_SIZE)
        self.chunk_delay = settings.catalog_chunk_delay if chunk_delay is None else chunk_delay
        self._sleep = sleep

    async def _pause_between_chunks(self, chunk_number: int) -> None:
        if chunk_number > 0 and self.chunk_delay > 0:
            await self._sleep(self.chunk_delay)

    async def resolve_items(
        self,
        items: Iterable[ParsedLineItem],
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ResolveSummary:
        """
        Resolve every item that still needs resolution, in place.

        Skipped and already matched items are left untouched. Items in chunks
        that never started because of cancellation stay pending.

        Args:
            items: Parsed line items (mutated: status and scryfall_id)
            cancel_event: When set, no further chunk is started
            on_progress: Called with the processed fraction after each chunk
        """
        pending = [item for item in items if item.needs_resolution]
        summary = ResolveSummary()
        total = len(pending)
        processed = 0

        for number, chunk in enumerate(chunked(pending, self.chunk_size)):
            await self._pause_between_chunks(number)

            # The flag may be set while pausing
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Resolution cancelled after %d of %d items", processed, total)
                summary.cancelled = True
                break

            identifiers = [item.identity.to_identifier() for item in chunk]
            try:
                lookup = await self._client.get_collection(identifiers)
            except CHUNK_FAILURES as e:
                logger.warning(
                    "Catalog lookup failed for chunk %d (%d items): %s", number + 1, len(chunk), e
                )
                for item in chunk:
                    item.mark_unmatched()
                summary.unmatched += len(chunk)
                summary.failed_chunks += 1
            else:
                index = CatalogIndex.from_cards(lookup.cards)
                for item in chunk:
                    card = index.match(item)
                    if card is None:
                        item.mark_unmatched()
                        summary.unmatched += 1
                    else:
                        item.mark_matched(card.id)
                        summary.cards[card.id] = card
                        summary.matched += 1

            processed += len(chunk)
            logger.debug("Resolved %d/%d items", processed, total)
            if on_progress is not None:
                on_progress(processed / total)

        return summary

    async def fetch_cards_by_id(self, card_ids: Iterable[str]) -> dict[str, CatalogCard]:
        """
        Fetch catalog data for a set of Scryfall IDs.

        IDs are deduplicated before chunking. IDs the catalog does not know
        are simply absent from the result.

        Raises:
            RateLimitTimeoutError: If a chunk exceeds the gate timeout
            CatalogUnavailableError: If a chunk fails for any other reason
        """
        unique_ids = list(dict.fromkeys(card_id for card_id in card_ids if card_id))
        cards: dict[str, CatalogCard] = {}

        for number, chunk in enumerate(chunked(unique_ids, self.chunk_size)):
            await self._pause_between_chunks(number)
            try:
                lookup = await self._client.get_collection([{"id": card_id} for card_id in chunk])
            except RateLimitTimeoutError:
                raise
            except (httpx.HTTPError, ValueError, KeyError) as e:
                logger.warning("Catalog fetch failed for chunk %d: %s", number + 1, e)
                raise CatalogUnavailableError(detail=str(e)) from e

            for card in lookup.cards:
                cards[card.id] = card
            if lookup.not_found:
                logger.debug("Catalog has no data for %d id(s)", len(lookup.not_found))

        return cards
