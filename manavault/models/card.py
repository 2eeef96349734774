from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CatalogCard:
    """
    A card record from the external catalog (Scryfall).

    Attributes:
        id: Scryfall card ID (stable, canonical for one printing)
        name: Full card name; double-faced cards use "Front // Back"
        set_code: Lowercase set code (e.g., "lea", "cmr")
        set_name: Human-readable set name
        collector_number: Collector number within the set (may be non-numeric)
        rarity: common, uncommon, rare, mythic, special, bonus
        colors: Color letters (W, U, B, R, G); empty for colorless
        color_identity: Commander color identity letters
        type_line: Full type line
        oracle_text: Rules text (faces joined for double-faced cards)
        legalities: Format key -> "legal" | "not_legal" | "restricted" | "banned"
        price_usd: Current nonfoil USD price
        price_usd_foil: Current foil USD price
        face_names: Individual face names for double-faced cards
    """

    id: str
    name: str
    set_code: str = ""
    set_name: str = ""
    collector_number: str = ""
    rarity: str = ""
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    type_line: str = ""
    oracle_text: str = ""
    legalities: dict[str, str] = field(default_factory=dict)
    price_usd: float | None = None
    price_usd_foil: float | None = None
    face_names: tuple[str, ...] = ()

    def legality(self, format_key: str) -> str:
        """Legality value for a format key; missing keys read as not_legal."""
        return self.legalities.get(format_key, "not_legal")
