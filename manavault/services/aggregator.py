"""
Import aggregation.

The only place quantities are summed: bulk creation persists one row per
AggregatedEntry as-is.

Two input shapes feed the same merge:
- Line items (CSV rows, decklist lines): role flags derive from the
  decklist section
- Flagged entries: role flags are given directly per entry

Within one AggregationKey quantities add up, and purchase_price and notes
keep the first non-empty value seen. Output order is unspecified.
"""

from collections.abc import Iterable
from dataclasses import replace

from manavault.models.import_item import (
    AggregatedEntry,
    AggregationKey,
    ItemStatus,
    ParsedLineItem,
    Section,
)

COMPANION_NOTE = "Companion"

SIDEBOARD_SECTIONS = frozenset({Section.SIDEBOARD, Section.COMPANION})


def line_item_to_entry(item: ParsedLineItem) -> AggregatedEntry | None:
    """
    Convert one resolved line item into a single-item AggregatedEntry.

    Returns:
        None for items that never aggregate: not matched, or Maybeboard.
    """
    if item.status != ItemStatus.MATCHED or not item.scryfall_id:
        return None
    if item.section == Section.MAYBEBOARD:
        return None

    return AggregatedEntry(
        scryfall_id=item.scryfall_id,
        quantity=item.quantity,
        condition=item.condition,
        finish=item.finish,
        purchase_price=item.purchase_price,
        notes=COMPANION_NOTE if item.section == Section.COMPANION else item.notes,
        is_commander=item.section == Section.COMMANDER,
        is_sideboard=item.section in SIDEBOARD_SECTIONS,
    )


def aggregate_entries(entries: Iterable[AggregatedEntry]) -> list[AggregatedEntry]:
    """Merge entries sharing an AggregationKey."""
    merged: dict[AggregationKey, AggregatedEntry] = {}

    for entry in entries:
        key = entry.key
        existing = merged.get(key)
        if existing is None:
            merged[key] = entry
            continue

        merged[key] = replace(
            existing,
            quantity=existing.quantity + entry.quantity,
            purchase_price=(
                existing.purchase_price
                if existing.purchase_price is not None
                else entry.purchase_price
            ),
            notes=existing.notes or entry.notes,
        )

    return list(merged.values())


def aggregate_line_items(items: Iterable[ParsedLineItem]) -> list[AggregatedEntry]:
    """
    Aggregate the matched, non-Maybeboard subset of line items.

    Commander lines become commander entries; Sideboard and Companion lines
    become sideboard entries (Companion entries carry the note "Companion").
    """
    converted = (line_item_to_entry(item) for item in items)
    return aggregate_entries(entry for entry in converted if entry is not None)
