from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CollectionType(str, Enum):
    """What a collection is used for."""

    TRADE_BINDER = "TRADE_BINDER"
    DECK = "DECK"


class DeckType(str, Enum):
    """Construction format of a DECK collection."""

    COMMANDER = "COMMANDER"
    STANDARD = "STANDARD"
    PLANAR_STANDARD = "PLANAR_STANDARD"
    MODERN = "MODERN"
    LEGACY = "LEGACY"
    VINTAGE = "VINTAGE"
    PIONEER = "PIONEER"
    PAUPER = "PAUPER"
    OATHBREAKER = "OATHBREAKER"
    DRAFT = "DRAFT"
    OTHER = "OTHER"


class Visibility(str, Enum):
    """Who may view a collection through its share link."""

    PRIVATE = "PRIVATE"
    INVITE_ONLY = "INVITE_ONLY"
    PUBLIC = "PUBLIC"


class Condition(str, Enum):
    """Physical card condition."""

    MINT = "MINT"
    NM = "NM"
    LP = "LP"
    MP = "MP"
    HP = "HP"
    DAMAGED = "DAMAGED"


class Finish(str, Enum):
    """Physical card finish."""

    NONFOIL = "nonfoil"
    FOIL = "foil"
    ETCHED = "etched"


@dataclass(frozen=True, slots=True)
class CollectionEntry:
    """
    A persisted card entry owned by one collection.

    Quantity is always at least 1; removing a card deletes the entry.
    """

    id: int
    collection_id: int
    scryfall_id: str
    quantity: int
    condition: Condition = Condition.NM
    finish: Finish = Finish.NONFOIL
    purchase_price: float | None = None
    notes: str | None = None
    is_commander: bool = False
    is_sideboard: bool = False
    is_signature_spell: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Collection:
    """A trade binder or deck owned by a user."""

    id: int
    user_id: str
    name: str
    type: CollectionType
    deck_type: DeckType | None = None
    description: str | None = None
    visibility: Visibility = Visibility.PRIVATE
    share_slug: str | None = None

    @property
    def is_deck(self) -> bool:
        return self.type == CollectionType.DECK
