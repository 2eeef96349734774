"""
Import pipeline models.

INVARIANTS:
- CardIdentity is never mutated after parse
- ParsedLineItem status/scryfall_id change only through the resolver
  (pending -> matched | unmatched) or an explicit skip
- AggregationKey is a structural composite key; two items aggregate
  together only when every component is equal
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from manavault.models.collection import Condition, Finish

# Double-faced card name separator ("Front // Back")
FACE_SEPARATOR = " // "


class Section(str, Enum):
    """Decklist section a line item was read from."""

    DECK = "Deck"
    COMMANDER = "Commander"
    SIDEBOARD = "Sideboard"
    COMPANION = "Companion"
    MAYBEBOARD = "Maybeboard"


class ItemStatus(str, Enum):
    """Resolution status of a parsed line item."""

    PENDING = "pending"
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    SKIPPED = "skipped"


def front_face_name(name: str) -> str:
    """
    Front face of a potentially double-faced card name.

    "Delver of Secrets // Insectile Aberration" -> "Delver of Secrets"
    """
    return name.split(FACE_SEPARATOR)[0] if FACE_SEPARATOR in name else name


@dataclass(frozen=True, slots=True)
class CardIdentity:
    """
    How an unresolved line item describes its card: a name, optionally
    narrowed by set code and collector number.
    """

    name: str | None = None
    set_code: str | None = None
    collector_number: str | None = None

    def to_identifier(self) -> dict[str, str]:
        """
        Build a Scryfall /cards/collection identifier.

        Priority: (set, collector_number), then (name, set), then name.
        Double-faced names are looked up by their front face only.
        """
        if self.set_code and self.collector_number:
            return {"set": self.set_code, "collector_number": self.collector_number}
        name = front_face_name(self.name or "")
        if self.set_code:
            return {"name": name, "set": self.set_code}
        return {"name": name}


@dataclass(slots=True)
class ParsedLineItem:
    """
    One card line read from CSV or decklist text.

    Attributes:
        raw_index: Position of the item in its parse output
        name: Card name as written
        quantity: Number of copies (>= 1)
        set_code: Lowercase set code, if given
        collector_number: Collector number as written, if given
        condition: Normalized condition (default NM)
        finish: Normalized finish (default nonfoil)
        notes: Free text notes, if given
        purchase_price: Parsed price, None when empty/zero/unparsable
        section: Decklist section (CSV rows are always Deck)
        status: Resolution status
        scryfall_id: Resolved Scryfall ID once matched
    """

    raw_index: int
    name: str
    quantity: int = 1
    set_code: str | None = None
    collector_number: str | None = None
    condition: Condition = Condition.NM
    finish: Finish = Finish.NONFOIL
    notes: str | None = None
    purchase_price: float | None = None
    section: Section = Section.DECK
    status: ItemStatus = ItemStatus.PENDING
    scryfall_id: str | None = None

    @property
    def identity(self) -> CardIdentity:
        return CardIdentity(
            name=self.name,
            set_code=self.set_code,
            collector_number=self.collector_number,
        )

    @property
    def needs_resolution(self) -> bool:
        """Skipped and already matched items are left out of resolver passes."""
        return self.status not in (ItemStatus.SKIPPED, ItemStatus.MATCHED)

    def mark_matched(self, scryfall_id: str) -> None:
        self.status = ItemStatus.MATCHED
        self.scryfall_id = scryfall_id

    def mark_unmatched(self) -> None:
        self.status = ItemStatus.UNMATCHED
        self.scryfall_id = None

    def skip(self) -> None:
        """User-driven skip; only unmatched (or pending) items may be skipped."""
        if self.status == ItemStatus.MATCHED:
            raise ValueError(f"Cannot skip matched item '{self.name}'")
        self.status = ItemStatus.SKIPPED


@dataclass(frozen=True, slots=True)
class AggregationKey:
    """Composite key under which resolved items are summed."""

    scryfall_id: str
    condition: Condition
    finish: Finish
    is_commander: bool = False
    is_sideboard: bool = False
    is_signature_spell: bool = False


@dataclass(frozen=True, slots=True)
class AggregatedEntry:
    """
    One entry ready for bulk creation.

    Unique per AggregationKey within one aggregation run.
    """

    scryfall_id: str
    quantity: int
    condition: Condition = Condition.NM
    finish: Finish = Finish.NONFOIL
    purchase_price: float | None = None
    notes: str | None = None
    is_commander: bool = False
    is_sideboard: bool = False
    is_signature_spell: bool = False

    @property
    def key(self) -> AggregationKey:
        return AggregationKey(
            scryfall_id=self.scryfall_id,
            condition=self.condition,
            finish=self.finish,
            is_commander=self.is_commander,
            is_sideboard=self.is_sideboard,
            is_signature_spell=self.is_signature_spell,
        )

    def to_payload(self) -> dict[str, Any]:
        """Bulk-create request shape."""
        return {
            "scryfall_id": self.scryfall_id,
            "quantity": self.quantity,
            "condition": self.condition.value,
            "finish": self.finish.value,
            "purchase_price": self.purchase_price,
            "notes": self.notes,
            "is_commander": self.is_commander,
            "is_sideboard": self.is_sideboard,
            "is_signature_spell": self.is_signature_spell,
        }
