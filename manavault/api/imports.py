"""
Import API endpoints.

Stateless three-step flow over a client-held item list:

1. preview: parse CSV or decklist text into line items
2. resolve: match pending/unmatched items against the catalog
   (skip marks unmatched items the user gives up on)
3. commit: aggregate matched items and write them to the collection
"""

from typing import Literal

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from manavault.api.dependencies import ImportServiceDep, OwnedCollectionDep, SessionDep
from manavault.api.schemas import CardResponse, EntryResponse
from manavault.models.collection import Condition, DeckType, Finish
from manavault.models.import_item import ItemStatus, ParsedLineItem, Section
from manavault.parsers.csv_import import ColumnMapping, CsvFormat
from manavault.services.import_service import ImportKind

router = APIRouter(prefix="/users/{user_id}/collections", tags=["imports"])


class LineItemModel(BaseModel):
    """Wire form of a parsed line item."""

    raw_index: int = Field(..., ge=0)
    name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    set_code: str | None = None
    collector_number: str | None = None
    condition: Condition = Condition.NM
    finish: Finish = Finish.NONFOIL
    notes: str | None = None
    purchase_price: float | None = Field(default=None, ge=0)
    section: Section = Section.DECK
    status: ItemStatus = ItemStatus.PENDING
    scryfall_id: str | None = None

    @classmethod
    def from_item(cls, item: ParsedLineItem) -> "LineItemModel":
        return cls(
            raw_index=item.raw_index,
            name=item.name,
            quantity=item.quantity,
            set_code=item.set_code,
            collector_number=item.collector_number,
            condition=item.condition,
            finish=item.finish,
            notes=item.notes,
            purchase_price=item.purchase_price,
            section=item.section,
            status=item.status,
            scryfall_id=item.scryfall_id,
        )

    def to_item(self) -> ParsedLineItem:
        return ParsedLineItem(**self.model_dump())


class ColumnMappingModel(BaseModel):
    """Explicit CSV column indexes (0-based)."""

    name: int = Field(..., ge=0)
    quantity: int | None = Field(default=None, ge=0)
    set_code: int | None = Field(default=None, ge=0)
    collector_number: int | None = Field(default=None, ge=0)
    condition: int | None = Field(default=None, ge=0)
    purchase_price: int | None = Field(default=None, ge=0)
    foil: int | None = Field(default=None, ge=0)
    notes: int | None = Field(default=None, ge=0)

    def to_mapping(self) -> ColumnMapping:
        return ColumnMapping(**self.model_dump())


class PreviewRequest(BaseModel):
    text: str = Field(..., min_length=1)
    kind: Literal["auto", "csv", "decklist"] = "auto"
    mapping: ColumnMappingModel | None = None


class PreviewResponse(BaseModel):
    kind: ImportKind
    items: list[LineItemModel]
    csv_format: CsvFormat | None = None
    headers: list[str] = Field(default_factory=list)
    requires_mapping: bool = False
    sections: list[Section] = Field(default_factory=list)
    suggested_deck_type: DeckType | None = None


class ItemsRequest(BaseModel):
    items: list[LineItemModel] = Field(..., min_length=1)


class SkipRequest(ItemsRequest):
    raw_index: int = Field(..., ge=0)


class ResolveResponse(BaseModel):
    items: list[LineItemModel]
    matched: int
    unmatched: int
    failed_chunks: int
    cards: list[CardResponse]


class ItemsResponse(BaseModel):
    items: list[LineItemModel]


class CommitResponse(BaseModel):
    imported: int
    failed: int
    entries: list[EntryResponse]


@router.post("/{collection_id}/import/preview", response_model=PreviewResponse)
async def preview_import(
    collection: OwnedCollectionDep,
    request: PreviewRequest,
    service: ImportServiceDep,
) -> PreviewResponse:
    """Parse import text without touching the catalog or the database."""
    mapping = request.mapping.to_mapping() if request.mapping else None
    if request.kind == "decklist":
        preview = service.preview_decklist(request.text)
    elif request.kind == "csv":
        preview = service.preview_csv(request.text, mapping)
    else:
        preview = service.preview(request.text, mapping)

    return PreviewResponse(
        kind=preview.kind,
        items=[LineItemModel.from_item(item) for item in preview.items],
        csv_format=preview.csv_format,
        headers=preview.headers,
        requires_mapping=preview.requires_mapping,
        sections=preview.sections,
        suggested_deck_type=preview.suggested_deck_type,
    )


@router.post("/{collection_id}/import/resolve", response_model=ResolveResponse)
async def resolve_import(
    collection: OwnedCollectionDep,
    request: ItemsRequest,
    service: ImportServiceDep,
) -> ResolveResponse:
    """
    Match items against the catalog.

    Catalog failures leave items unmatched instead of failing the request.
    """
    items = [model.to_item() for model in request.items]
    summary = await service.resolve(items)
    return ResolveResponse(
        items=[LineItemModel.from_item(item) for item in items],
        matched=summary.matched,
        unmatched=summary.unmatched,
        failed_chunks=summary.failed_chunks,
        cards=[CardResponse.from_card(card) for card in summary.cards.values()],
    )


@router.post("/{collection_id}/import/skip", response_model=ItemsResponse)
async def skip_import_item(
    collection: OwnedCollectionDep,
    request: SkipRequest,
    service: ImportServiceDep,
) -> ItemsResponse:
    items = [model.to_item() for model in request.items]
    try:
        service.skip(items, request.raw_index)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No item with raw_index {request.raw_index}",
        ) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return ItemsResponse(items=[LineItemModel.from_item(item) for item in items])


@router.post("/{collection_id}/import/commit", response_model=CommitResponse)
async def commit_import(
    collection: OwnedCollectionDep,
    request: ItemsRequest,
    session: SessionDep,
    service: ImportServiceDep,
) -> CommitResponse:
    """Aggregate matched items and add them to the collection."""
    outcome = await service.commit(
        session, collection.id, [model.to_item() for model in request.items]
    )
    return CommitResponse(
        imported=outcome.imported,
        failed=outcome.failed,
        entries=[EntryResponse.from_model(entry) for entry in outcome.entries],
    )
