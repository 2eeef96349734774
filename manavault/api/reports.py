"""
Derived collection views: deck validation, statistics and CSV export.

All three load every entry of the collection, fetch catalog data for the
distinct Scryfall IDs through the shared rate-limit gate, and compute the
result on demand. Nothing here is persisted.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response
from pydantic import BaseModel, Field

from manavault.api.dependencies import (
    OwnedCollectionDep,
    ResolverDep,
    SessionDep,
    load_entries_with_cards,
)
from manavault.db import collection_to_model, entry_to_model
from manavault.models.validation import IssueType, ValidationIssue
from manavault.services.collection_stats import compute_collection_stats
from manavault.services.csv_export import ExportLayout, build_csv, export_filename
from manavault.services.deck_validator import validate_deck

router = APIRouter(prefix="/users/{user_id}/collections", tags=["reports"])


class IssueResponse(BaseModel):
    type: IssueType
    message: str
    card_id: str | None = None

    @classmethod
    def from_issue(cls, issue: ValidationIssue) -> "IssueResponse":
        return cls(type=issue.type, message=issue.message, card_id=issue.card_id)


class ValidationResponse(BaseModel):
    """Deck validation outcome."""

    evaluated: bool = Field(..., description="False when the collection has no format rules")
    valid: bool
    format_name: str | None = None
    total_entries: int = 0
    errors: list[IssueResponse] = Field(default_factory=list)
    warnings: list[IssueResponse] = Field(default_factory=list)


class ValuableEntryResponse(BaseModel):
    entry_id: int
    scryfall_id: str
    name: str
    quantity: int
    purchase_price: float
    total_value: float


class StatsResponse(BaseModel):
    """Aggregate statistics for one collection."""

    total_cards: int
    unique_entries: int
    total_value: float
    by_color: dict[str, int]
    by_rarity: dict[str, int]
    most_valuable: list[ValuableEntryResponse]
    missing_card_data: int


@router.get("/{collection_id}/validation", response_model=ValidationResponse)
async def validate_collection(
    collection: OwnedCollectionDep,
    session: SessionDep,
    resolver: ResolverDep,
) -> ValidationResponse:
    """
    Validate a deck against its format.

    An empty deck is reported with total_entries=0 so clients can show it
    as empty rather than as evaluated.
    """
    model = collection_to_model(collection)
    if not model.is_deck:
        result = validate_deck(model, [], {})
        return ValidationResponse(evaluated=result.evaluated, valid=result.valid)

    rows, cards = await load_entries_with_cards(session, resolver, collection.id)
    entries = [entry_to_model(row) for row in rows]
    result = validate_deck(model, entries, cards)

    return ValidationResponse(
        evaluated=result.evaluated,
        valid=result.valid,
        format_name=result.format_name,
        total_entries=len(entries),
        errors=[IssueResponse.from_issue(issue) for issue in result.errors],
        warnings=[IssueResponse.from_issue(issue) for issue in result.warnings],
    )


@router.get("/{collection_id}/stats", response_model=StatsResponse)
async def collection_stats(
    collection: OwnedCollectionDep,
    session: SessionDep,
    resolver: ResolverDep,
) -> StatsResponse:
    """Card count, value, color and rarity breakdowns, most valuable entries."""
    rows, cards = await load_entries_with_cards(session, resolver, collection.id)
    stats = compute_collection_stats([entry_to_model(row) for row in rows], cards)

    return StatsResponse(
        total_cards=stats.total_cards,
        unique_entries=stats.unique_entries,
        total_value=stats.total_value,
        by_color=stats.by_color,
        by_rarity=stats.by_rarity,
        most_valuable=[
            ValuableEntryResponse(
                entry_id=v.entry_id,
                scryfall_id=v.scryfall_id,
                name=v.name,
                quantity=v.quantity,
                purchase_price=v.purchase_price,
                total_value=v.total_value,
            )
            for v in stats.most_valuable
        ],
        missing_card_data=stats.missing_card_data,
    )


@router.get("/{collection_id}/export")
async def export_collection(
    collection: OwnedCollectionDep,
    session: SessionDep,
    resolver: ResolverDep,
    layout: Annotated[ExportLayout, Query(alias="format")] = ExportLayout.MOXFIELD,
) -> Response:
    """Download the collection as Moxfield or Deckbox CSV."""
    rows, cards = await load_entries_with_cards(session, resolver, collection.id)
    content = build_csv([entry_to_model(row) for row in rows], cards, layout)
    filename = export_filename(collection.name, layout)

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
