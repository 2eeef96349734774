"""
Deck format construction rules.

Single source of truth for per-format deck construction constraints.
Every DeckType has exactly one entry (OTHER carries an all-disabled rule);
completeness is checked when this module is imported.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from manavault.models.collection import DeckType


@dataclass(frozen=True, slots=True)
class FormatRule:
    """
    Construction constraints for one deck format.

    Attributes:
        name: Display name of the format
        min_deck_size: Minimum maindeck size (None = no minimum)
        max_deck_size: Maximum maindeck size (None = no maximum)
        max_copies: Copy limit per card name (None = unlimited)
        basic_land_exempt: Basic lands ignore copy limits and legality checks
        sideboard_size: Sideboard cap (None = unlimited, 0 = no sideboard)
        singleton: Each card name may appear once
        requires_commander: At least one commander-flagged entry is required
        commander_label: What the format calls its commander
        max_commanders: Commander-flagged copies allowed (None = no cap)
        requires_signature_spell: A signature-spell-flagged entry is required
        legality_key: Scryfall legalities key (None = no catalog legality check)
        legal_sets: Allowed set codes when legality is set-based
        legal_set_names: Display names for legal_sets
        banned_cards: Card names banned by a set-based format
        description: Short format summary
    """

    name: str
    min_deck_size: int | None = None
    max_deck_size: int | None = None
    max_copies: int | None = None
    basic_land_exempt: bool = True
    sideboard_size: int | None = None
    singleton: bool = False
    requires_commander: bool = False
    commander_label: str | None = None
    max_commanders: int | None = None
    requires_signature_spell: bool = False
    legality_key: str | None = None
    legal_sets: frozenset[str] = field(default_factory=frozenset)
    legal_set_names: dict[str, str] = field(default_factory=dict)
    banned_cards: frozenset[str] = field(default_factory=frozenset)
    description: str = ""

    @property
    def copy_limit(self) -> int | None:
        """Effective per-name limit: singleton formats are limited to one."""
        return 1 if self.singleton else self.max_copies

    @property
    def uses_set_legality(self) -> bool:
        return self.legality_key is None and bool(self.legal_sets or self.banned_cards)


def _constructed(name: str, legality_key: str) -> FormatRule:
    return FormatRule(
        name=name,
        min_deck_size=60,
        max_copies=4,
        sideboard_size=15,
        legality_key=legality_key,
    )


DECK_FORMAT_RULES: MappingProxyType[DeckType, FormatRule] = MappingProxyType(
    {
        DeckType.STANDARD: _constructed("Standard", "standard"),
        DeckType.PLANAR_STANDARD: FormatRule(
            name="Planar Standard",
            min_deck_size=60,
            max_copies=4,
            sideboard_size=15,
            legality_key=None,
            legal_sets=frozenset({"ecl", "eoe", "tdm", "dft", "fdn"}),
            legal_set_names={
                "ecl": "Lorwyn Eclipsed",
                "eoe": "Edge of Eternities",
                "tdm": "Tarkir: Dragonstorm",
                "dft": "Aetherdrift",
                "fdn": "Foundations",
            },
            banned_cards=frozenset({"Cori-steel Cutter"}),
            description=(
                "Community format using Universe Within sets from the last two years "
                "plus Foundations. Excludes Universes Beyond sets."
            ),
        ),
        DeckType.MODERN: _constructed("Modern", "modern"),
        DeckType.LEGACY: _constructed("Legacy", "legacy"),
        DeckType.VINTAGE: _constructed("Vintage", "vintage"),
        DeckType.PIONEER: _constructed("Pioneer", "pioneer"),
        DeckType.PAUPER: _constructed("Pauper", "pauper"),
        DeckType.COMMANDER: FormatRule(
            name="Commander",
            min_deck_size=100,
            max_deck_size=100,
            max_copies=1,
            sideboard_size=0,
            singleton=True,
            requires_commander=True,
            commander_label="Commander",
            max_commanders=2,
            legality_key="commander",
        ),
        DeckType.OATHBREAKER: FormatRule(
            name="Oathbreaker",
            min_deck_size=60,
            max_deck_size=60,
            max_copies=1,
            sideboard_size=0,
            singleton=True,
            requires_commander=True,
            commander_label="Oathbreaker",
            max_commanders=1,
            requires_signature_spell=True,
            legality_key="oathbreaker",
            description=(
                "Multiplayer singleton format with a Planeswalker Oathbreaker "
                "and a Signature Spell in the command zone."
            ),
        ),
        DeckType.DRAFT: FormatRule(
            name="Draft",
            min_deck_size=40,
            max_copies=None,
            sideboard_size=None,
            legality_key=None,
        ),
        DeckType.OTHER: FormatRule(
            name="Other",
            basic_land_exempt=False,
        ),
    }
)

_missing = set(DeckType) - set(DECK_FORMAT_RULES)
if _missing:
    raise RuntimeError(f"Missing format rules for deck types: {sorted(m.value for m in _missing)}")


def get_format_rule(deck_type: DeckType) -> FormatRule:
    """Rule for a deck type. Every DeckType has one."""
    return DECK_FORMAT_RULES[deck_type]


BASIC_LANDS = frozenset({"Plains", "Island", "Swamp", "Mountain", "Forest", "Wastes"})

SNOW_COVERED_PREFIX = "Snow-Covered "


def is_basic_land(card_name: str | None) -> bool:
    """
    True for basic lands and their Snow-Covered variants.

    >>> is_basic_land("Snow-Covered Island")
    True
    """
    if not card_name:
        return False
    if card_name in BASIC_LANDS:
        return True
    if card_name.startswith(SNOW_COVERED_PREFIX):
        return card_name[len(SNOW_COVERED_PREFIX) :] in BASIC_LANDS
    return False


_PARTNER_WITH = re.compile(r"partner with ([^\n(]+)")


def _has_generic_partner(text: str) -> bool:
    return bool(re.search(r"\bpartner\b", text)) and not re.search(r"\bpartner with\b", text)


def are_partners_compatible(card1: dict[str, Any], card2: dict[str, Any]) -> bool:
    """
    Whether two commanders may legally share the command zone.

    Supports Partner, Partner with [Name], Friends forever,
    Choose a Background + Background, and Doctor's companion + Time Lord.

    Args:
        card1: Card fields (name, oracle_text, type_line)
        card2: Card fields (name, oracle_text, type_line)
    """
    text1 = (card1.get("oracle_text") or "").lower()
    text2 = (card2.get("oracle_text") or "").lower()
    type1 = card1.get("type_line") or ""
    type2 = card2.get("type_line") or ""

    if _has_generic_partner(text1) and _has_generic_partner(text2):
        return True

    pw1 = _PARTNER_WITH.search(text1)
    pw2 = _PARTNER_WITH.search(text2)
    if pw1 and pw1.group(1).strip() == (card2.get("name") or "").lower():
        return True
    if pw2 and pw2.group(1).strip() == (card1.get("name") or "").lower():
        return True

    if "friends forever" in text1 and "friends forever" in text2:
        return True

    if "choose a background" in text1 and "Background" in type2:
        return True
    if "choose a background" in text2 and "Background" in type1:
        return True

    if "doctor's companion" in text1 and "Time Lord" in type2:
        return True
    return "doctor's companion" in text2 and "Time Lord" in type1
