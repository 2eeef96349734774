"""
Card catalog endpoints.

Proxies Scryfall search, single-card and batch lookups through the shared
rate-limit gate. Catalog failures surface as 502 and gate timeouts as 503.
"""

from typing import Annotated, Any

import httpx
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from manavault.api.dependencies import CatalogClientDep
from manavault.api.schemas import CardResponse
from manavault.config import SCRYFALL_CHUNK_SIZE
from manavault.models.failure import CatalogUnavailableError

router = APIRouter(prefix="/cards", tags=["cards"])

# Network, HTTP status and malformed payload failures
CATALOG_ERRORS = (httpx.HTTPError, ValueError, KeyError)


class CardLookupRequest(BaseModel):
    """Batch lookup request: identifiers in Scryfall /cards/collection form."""

    identifiers: list[dict[str, str]] = Field(
        ...,
        min_length=1,
        max_length=SCRYFALL_CHUNK_SIZE,
        description="Identifier objects: id, name (+ set), or set + collector_number",
    )


class CardLookupResponse(BaseModel):
    cards: list[CardResponse]
    not_found: list[dict[str, Any]]


@router.get("/search", response_model=list[CardResponse])
async def search_cards(
    client: CatalogClientDep,
    q: Annotated[str, Query(min_length=1)],
    page: Annotated[int, Query(ge=1)] = 1,
) -> list[CardResponse]:
    """Full-text Scryfall search; no matches is an empty list."""
    try:
        cards = await client.search(q, page)
    except CATALOG_ERRORS as e:
        raise CatalogUnavailableError(detail=str(e)) from e
    return [CardResponse.from_card(card) for card in cards]


@router.post("/collection", response_model=CardLookupResponse)
async def lookup_cards(request: CardLookupRequest, client: CatalogClientDep) -> CardLookupResponse:
    try:
        lookup = await client.get_collection(request.identifiers)
    except CATALOG_ERRORS as e:
        raise CatalogUnavailableError(detail=str(e)) from e
    return CardLookupResponse(
        cards=[CardResponse.from_card(card) for card in lookup.cards],
        not_found=lookup.not_found,
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: str, client: CatalogClientDep) -> CardResponse:
    try:
        card = await client.get_card(card_id)
    except CATALOG_ERRORS as e:
        raise CatalogUnavailableError(detail=str(e)) from e
    if card is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card {card_id} not found",
        )
    return CardResponse.from_card(card)
