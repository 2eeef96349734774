"""
Collection statistics.

Pure computation over a collection's entries and the catalog data fetched
for them. Entries without catalog data still count toward card count and
purchase value but are left out of the color and rarity breakdowns and
the most-valuable list.
"""

from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal

from manavault.config import TOP_VALUABLE_LIMIT
from manavault.models.card import CatalogCard
from manavault.models.collection import CollectionEntry
from manavault.models.statistics import CollectionStats, ValuableEntry

COLORLESS = "Colorless"
MULTICOLOR = "Multicolor"
UNKNOWN_RARITY = "Unknown"

CENT = Decimal("0.01")


def color_bucket(colors: Sequence[str]) -> str:
    """Colorless, the single color letter, or Multicolor."""
    if not colors:
        return COLORLESS
    if len(colors) == 1:
        return colors[0]
    return MULTICOLOR


def rarity_bucket(rarity: str | None) -> str:
    """'mythic' -> 'Mythic'; empty -> 'Unknown'."""
    if not rarity:
        return UNKNOWN_RARITY
    return rarity[0].upper() + rarity[1:]


def round_money(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


def compute_collection_stats(
    entries: Sequence[CollectionEntry],
    cards: Mapping[str, CatalogCard],
    top_limit: int = TOP_VALUABLE_LIMIT,
) -> CollectionStats:
    """
    Compute statistics for a collection.

    Args:
        entries: All entries of the collection, in display order
        cards: Catalog data by Scryfall ID
        top_limit: Size of the most-valuable list

    Returns:
        CollectionStats
    """
    stats = CollectionStats(unique_entries=len(entries))
    total_value = Decimal("0")
    valuable: list[ValuableEntry] = []

    for entry in entries:
        stats.total_cards += entry.quantity

        if entry.purchase_price is not None:
            # str() keeps the stored cents exact
            total_value += Decimal(str(entry.purchase_price)) * entry.quantity

        card = cards.get(entry.scryfall_id)
        if card is None:
            stats.missing_card_data += 1
            continue

        color = color_bucket(card.colors)
        stats.by_color[color] = stats.by_color.get(color, 0) + entry.quantity
        rarity = rarity_bucket(card.rarity)
        stats.by_rarity[rarity] = stats.by_rarity.get(rarity, 0) + entry.quantity

        if entry.purchase_price is not None:
            valuable.append(
                ValuableEntry(
                    entry_id=entry.id,
                    scryfall_id=entry.scryfall_id,
                    name=card.name,
                    quantity=entry.quantity,
                    purchase_price=entry.purchase_price,
                    total_value=round_money(Decimal(str(entry.purchase_price)) * entry.quantity),
                )
            )

    # sorted() is stable: ties keep entry order
    valuable = sorted(valuable, key=lambda v: v.purchase_price * v.quantity, reverse=True)

    stats.total_value = round_money(total_value)
    stats.most_valuable = valuable[:top_limit]
    return stats
