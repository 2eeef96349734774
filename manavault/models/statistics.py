from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ValuableEntry:
    """An entry ranked by purchase value (price x quantity)."""

    entry_id: int
    scryfall_id: str
    name: str
    quantity: int
    purchase_price: float
    total_value: float


@dataclass
class CollectionStats:
    """
    Aggregate statistics for one collection.

    Attributes:
        total_cards: Sum of entry quantities
        unique_entries: Number of entries
        total_value: Sum of purchase_price x quantity, rounded to cents
        by_color: "W"/"U"/"B"/"R"/"G", "Colorless" or "Multicolor" -> quantity
        by_rarity: Capitalized rarity ("Common", "Mythic", "Unknown") -> quantity
        most_valuable: Top entries by purchase value, highest first
        missing_card_data: Entries whose catalog data could not be found
    """

    total_cards: int = 0
    unique_entries: int = 0
    total_value: float = 0.0
    by_color: dict[str, int] = field(default_factory=dict)
    by_rarity: dict[str, int] = field(default_factory=dict)
    most_valuable: list[ValuableEntry] = field(default_factory=list)
    missing_card_data: int = 0
