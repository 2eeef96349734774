"""
Collection sharing endpoints.

Owners set visibility and invite users; anyone holding a share link can
open a collection the visibility allows them to see.
"""

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel

from manavault.api.dependencies import OwnedCollectionDep, SessionDep
from manavault.api.schemas import CollectionResponse, EntryResponse
from manavault.db import (
    add_share,
    can_view_shared,
    collection_to_model,
    entry_to_model,
    get_collection_by_slug,
    list_entries,
    list_shares,
    remove_share,
    set_visibility,
)
from manavault.models.collection import Visibility

router = APIRouter(prefix="/users/{user_id}/collections", tags=["sharing"])
shared_router = APIRouter(prefix="/shared", tags=["sharing"])


class VisibilityRequest(BaseModel):
    visibility: Visibility


class SharesResponse(BaseModel):
    collection_id: int
    visibility: Visibility
    share_slug: str | None = None
    shared_with: list[str]


class SharedCollectionResponse(BaseModel):
    """Read-only view of a shared collection."""

    collection: CollectionResponse
    entries: list[EntryResponse]


@router.put("/{collection_id}/visibility", response_model=CollectionResponse)
async def update_visibility(
    collection: OwnedCollectionDep,
    request: VisibilityRequest,
    session: SessionDep,
) -> CollectionResponse:
    """Change visibility; the share slug is created on the first non-private change."""
    updated = await set_visibility(session, collection, request.visibility)
    return CollectionResponse.from_model(collection_to_model(updated))


@router.get("/{collection_id}/shares", response_model=SharesResponse)
async def get_shares(collection: OwnedCollectionDep, session: SessionDep) -> SharesResponse:
    return SharesResponse(
        collection_id=collection.id,
        visibility=collection.visibility,
        share_slug=collection.share_slug,
        shared_with=await list_shares(session, collection.id),
    )


@router.post(
    "/{collection_id}/shares/{other_user_id}",
    response_model=SharesResponse,
    status_code=status.HTTP_201_CREATED,
)
async def share_collection(
    collection: OwnedCollectionDep,
    other_user_id: str,
    session: SessionDep,
) -> SharesResponse:
    """Invite a user to view an INVITE_ONLY collection."""
    if other_user_id == collection.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot share a collection with its owner",
        )
    if not await add_share(session, collection.id, other_user_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Collection is already shared with {other_user_id}",
        )
    return await get_shares(collection, session)


@router.delete(
    "/{collection_id}/shares/{other_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def unshare_collection(
    collection: OwnedCollectionDep,
    other_user_id: str,
    session: SessionDep,
) -> Response:
    if not await remove_share(session, collection.id, other_user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Collection is not shared with {other_user_id}",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@shared_router.get("/collections/{slug}", response_model=SharedCollectionResponse)
async def view_shared_collection(
    slug: str,
    session: SessionDep,
    viewer_id: str | None = None,
) -> SharedCollectionResponse:
    """
    Open a collection through its share link.

    Private collections read as not found. Invite-only collections are
    forbidden to viewers who are neither the owner nor invited.
    """
    collection = await get_collection_by_slug(session, slug)
    if collection is None or collection.visibility == Visibility.PRIVATE:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Collection not found")
    if not await can_view_shared(session, collection, viewer_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    entries = await list_entries(session, collection.id)
    return SharedCollectionResponse(
        collection=CollectionResponse.from_model(collection_to_model(collection)),
        entries=[EntryResponse.from_model(entry_to_model(e)) for e in entries],
    )
