"""
Request/response models shared by several routers.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from manavault.models.card import CatalogCard
from manavault.models.collection import (
    Collection,
    CollectionEntry,
    CollectionType,
    Condition,
    DeckType,
    Finish,
    Visibility,
)
from manavault.models.import_item import AggregatedEntry


class CardResponse(BaseModel):
    """Catalog card data exposed to clients."""

    id: str
    name: str
    set_code: str
    set_name: str
    collector_number: str
    rarity: str
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    type_line: str = ""
    legalities: dict[str, str] = Field(default_factory=dict)
    price_usd: float | None = None
    price_usd_foil: float | None = None

    @classmethod
    def from_card(cls, card: CatalogCard) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            set_code=card.set_code,
            set_name=card.set_name,
            collector_number=card.collector_number,
            rarity=card.rarity,
            colors=list(card.colors),
            color_identity=list(card.color_identity),
            type_line=card.type_line,
            legalities=dict(card.legalities),
            price_usd=card.price_usd,
            price_usd_foil=card.price_usd_foil,
        )


class CollectionResponse(BaseModel):
    """A collection without its entries."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    name: str
    type: CollectionType
    deck_type: DeckType | None = None
    description: str | None = None
    visibility: Visibility = Visibility.PRIVATE
    share_slug: str | None = None

    @classmethod
    def from_model(cls, collection: Collection) -> "CollectionResponse":
        return cls.model_validate(collection)


class EntryResponse(BaseModel):
    """A persisted collection entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    collection_id: int
    scryfall_id: str
    quantity: int
    condition: Condition
    finish: Finish
    purchase_price: float | None = None
    notes: str | None = None
    is_commander: bool = False
    is_sideboard: bool = False
    is_signature_spell: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, entry: CollectionEntry) -> "EntryResponse":
        return cls.model_validate(entry)


class EntryCreate(BaseModel):
    """One entry to add to a collection."""

    scryfall_id: str = Field(..., min_length=1, max_length=36)
    quantity: int = Field(default=1, ge=1)
    condition: Condition = Condition.NM
    finish: Finish = Finish.NONFOIL
    purchase_price: float | None = Field(default=None, ge=0)
    notes: str | None = None
    is_commander: bool = False
    is_sideboard: bool = False
    is_signature_spell: bool = False

    def to_entry(self) -> AggregatedEntry:
        return AggregatedEntry(
            scryfall_id=self.scryfall_id,
            quantity=self.quantity,
            condition=self.condition,
            finish=self.finish,
            purchase_price=self.purchase_price,
            notes=self.notes,
            is_commander=self.is_commander,
            is_sideboard=self.is_sideboard,
            is_signature_spell=self.is_signature_spell,
        )
