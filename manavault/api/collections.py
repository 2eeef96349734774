"""
Collection API endpoints.

CRUD for a user's collections and their entries. Users are external to
this service; the user_id path segment names the owner and every
collection route checks ownership against it.
"""

from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from manavault.api.dependencies import OwnedCollectionDep, SessionDep
from manavault.api.schemas import CollectionResponse, EntryCreate, EntryResponse
from manavault.config import DEFAULT_PAGE_SIZE, MAX_BULK_ENTRIES, MAX_PAGE_SIZE
from manavault.db import (
    bulk_create_entries,
    collection_to_model,
    count_entries,
    create_collection,
    create_entry,
    delete_collection,
    delete_entry,
    entry_to_model,
    get_entry,
    list_collections,
    list_entries,
    update_collection,
    update_entry,
)
from manavault.models.collection import CollectionType, Condition, DeckType, Finish

router = APIRouter(prefix="/users/{user_id}/collections", tags=["collections"])


class CollectionCreateRequest(BaseModel):
    """Request model for creating a collection."""

    name: str = Field(..., min_length=1, max_length=255)
    type: CollectionType
    deck_type: DeckType | None = Field(
        default=None,
        description="Required for DECK collections, not allowed otherwise",
    )
    description: str | None = None


class CollectionUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    deck_type: DeckType | None = None


class CollectionSummary(CollectionResponse):
    """A collection in the user's list."""

    entry_count: int = 0
    total_cards: int = 0


class CollectionDetailResponse(BaseModel):
    """A collection with one page of its entries."""

    collection: CollectionResponse
    entries: list[EntryResponse]
    total_entries: int
    page: int
    page_size: int


class EntryUpdateRequest(BaseModel):
    """Partial entry update; omitted fields are left unchanged."""

    quantity: int | None = Field(default=None, ge=1)
    condition: Condition | None = None
    finish: Finish | None = None
    purchase_price: float | None = Field(default=None, ge=0)
    notes: str | None = None
    is_commander: bool | None = None
    is_sideboard: bool | None = None
    is_signature_spell: bool | None = None


# Fields that may be explicitly cleared with null
NULLABLE_ENTRY_FIELDS = frozenset({"purchase_price", "notes"})


class BulkCreateRequest(BaseModel):
    """Entries to create as-is; no aggregation is applied."""

    entries: list[EntryCreate] = Field(..., min_length=1, max_length=MAX_BULK_ENTRIES)


class BulkCreateResponse(BaseModel):
    imported: int
    entries: list[EntryResponse]


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_collection_endpoint(
    user_id: str,
    request: CollectionCreateRequest,
    session: SessionDep,
) -> CollectionResponse:
    """Create a trade binder or deck."""
    try:
        collection = await create_collection(
            session,
            user_id,
            name=request.name,
            collection_type=request.type,
            deck_type=request.deck_type,
            description=request.description,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return CollectionResponse.from_model(collection_to_model(collection))


@router.get("", response_model=list[CollectionSummary])
async def list_collections_endpoint(user_id: str, session: SessionDep) -> list[CollectionSummary]:
    """List the user's collections with entry and card counts."""
    rows = await list_collections(session, user_id)
    return [
        CollectionSummary(
            **CollectionResponse.from_model(collection_to_model(collection)).model_dump(),
            entry_count=entry_count,
            total_cards=total_cards,
        )
        for collection, entry_count, total_cards in rows
    ]


@router.get("/{collection_id}", response_model=CollectionDetailResponse)
async def get_collection_endpoint(
    collection: OwnedCollectionDep,
    session: SessionDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> CollectionDetailResponse:
    """Get a collection and one page of its entries."""
    total = await count_entries(session, collection.id)
    entries = await list_entries(
        session, collection.id, offset=(page - 1) * page_size, limit=page_size
    )
    return CollectionDetailResponse(
        collection=CollectionResponse.from_model(collection_to_model(collection)),
        entries=[EntryResponse.from_model(entry_to_model(e)) for e in entries],
        total_entries=total,
        page=page,
        page_size=page_size,
    )


@router.patch("/{collection_id}", response_model=CollectionResponse)
async def update_collection_endpoint(
    collection: OwnedCollectionDep,
    request: CollectionUpdateRequest,
    session: SessionDep,
) -> CollectionResponse:
    """Rename, re-describe, or change the deck type of a DECK collection."""
    try:
        updated = await update_collection(
            session,
            collection,
            name=request.name,
            description=request.description,
            deck_type=request.deck_type,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return CollectionResponse.from_model(collection_to_model(updated))


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collection_endpoint(
    collection: OwnedCollectionDep,
    session: SessionDep,
) -> Response:
    """Delete a collection with all its entries and shares."""
    await delete_collection(session, collection.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Entries ---


@router.post(
    "/{collection_id}/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_entry_endpoint(
    collection: OwnedCollectionDep,
    request: EntryCreate,
    session: SessionDep,
) -> EntryResponse:
    entry = await create_entry(session, collection.id, request.to_entry())
    return EntryResponse.from_model(entry_to_model(entry))


@router.post(
    "/{collection_id}/entries/bulk",
    response_model=BulkCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def bulk_create_entries_endpoint(
    collection: OwnedCollectionDep,
    request: BulkCreateRequest,
    session: SessionDep,
) -> BulkCreateResponse:
    """
    Create up to MAX_BULK_ENTRIES entries in one request.

    Each request entry becomes exactly one row; callers aggregate first.
    """
    try:
        rows = await bulk_create_entries(
            session, collection.id, [entry.to_entry() for entry in request.entries]
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return BulkCreateResponse(
        imported=len(rows),
        entries=[EntryResponse.from_model(entry_to_model(row)) for row in rows],
    )


@router.patch("/{collection_id}/entries/{entry_id}", response_model=EntryResponse)
async def update_entry_endpoint(
    collection: OwnedCollectionDep,
    entry_id: int,
    request: EntryUpdateRequest,
    session: SessionDep,
) -> EntryResponse:
    entry = await get_entry(session, collection.id, entry_id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entry {entry_id} not found",
        )

    changes: dict[str, Any] = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_ENTRY_FIELDS
    }
    try:
        updated = await update_entry(session, entry, changes)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return EntryResponse.from_model(entry_to_model(updated))


@router.delete(
    "/{collection_id}/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_entry_endpoint(
    collection: OwnedCollectionDep,
    entry_id: int,
    session: SessionDep,
) -> Response:
    """Remove an entry; there are no zero-quantity entries."""
    deleted = await delete_entry(session, collection.id, entry_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entry {entry_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
