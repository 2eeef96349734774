"""
CSV export in Moxfield and Deckbox layouts.

Rows are written with the csv module (minimal RFC4180 quoting, "\\n" line
endings). Condition codes are written as the long labels both tools read.
"""

import csv
from collections.abc import Mapping, Sequence
from enum import Enum
from io import StringIO

from manavault.models.card import CatalogCard
from manavault.models.collection import CollectionEntry, Condition, Finish


class ExportLayout(str, Enum):
    """Target tool of a CSV export."""

    MOXFIELD = "moxfield"
    DECKBOX = "deckbox"


MOXFIELD_HEADERS = ["Count", "Name", "Edition", "Condition", "Purchase Price", "Section"]
DECKBOX_HEADERS = ["Count", "Name", "Edition", "Condition", "Language", "Foil", "Tags", "My Price"]

CONDITION_LABELS: dict[Condition, str] = {
    Condition.MINT: "Mint",
    Condition.NM: "Near Mint",
    Condition.LP: "Lightly Played",
    Condition.MP: "Moderately Played",
    Condition.HP: "Heavily Played",
    Condition.DAMAGED: "Damaged",
}

DEFAULT_CONDITION_LABEL = "Near Mint"
DEFAULT_LANGUAGE = "English"


def condition_label(condition: Condition | str | None) -> str:
    try:
        return CONDITION_LABELS[Condition(condition)]
    except (KeyError, ValueError):
        return DEFAULT_CONDITION_LABEL


def format_price(price: float | None) -> str:
    return "" if price is None else f"{price:.2f}"


def _moxfield_row(entry: CollectionEntry, card: CatalogCard | None) -> list[str]:
    return [
        str(entry.quantity),
        card.name if card else "",
        card.set_name if card else "",
        condition_label(entry.condition),
        format_price(entry.purchase_price),
        "sideboard" if entry.is_sideboard else "mainboard",
    ]


def _deckbox_row(entry: CollectionEntry, card: CatalogCard | None) -> list[str]:
    return [
        str(entry.quantity),
        card.name if card else "",
        card.set_name if card else "",
        condition_label(entry.condition),
        DEFAULT_LANGUAGE,
        "" if entry.finish == Finish.NONFOIL else entry.finish.value,
        "Sideboard" if entry.is_sideboard else "",
        format_price(entry.purchase_price),
    ]


def build_csv(
    entries: Sequence[CollectionEntry],
    cards: Mapping[str, CatalogCard],
    layout: ExportLayout,
) -> str:
    """
    Render entries as CSV text in the given layout.

    Entries without catalog data are written with empty name and edition.
    """
    if layout == ExportLayout.DECKBOX:
        headers, row_for = DECKBOX_HEADERS, _deckbox_row
    else:
        headers, row_for = MOXFIELD_HEADERS, _moxfield_row

    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for entry in entries:
        writer.writerow(row_for(entry, cards.get(entry.scryfall_id)))
    return buffer.getvalue()


def export_filename(collection_name: str, layout: ExportLayout) -> str:
    """'My Deck!' -> 'my_deck_moxfield.csv'"""
    slug = "".join(ch if ch.isalnum() else "_" for ch in collection_name.lower()).strip("_")
    return f"{slug or 'collection'}_{layout.value}.csv"
