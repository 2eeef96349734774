"""
Shared FastAPI dependencies.

The catalog client (and with it the process-wide rate-limit gate) is
created in the application lifespan and stored on app.state; tests
override get_catalog_client instead.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from manavault.db.database import get_session
from manavault.db.operations import get_collection, list_entries
from manavault.models.card import CatalogCard
from manavault.models.db import CollectionDB, CollectionEntryDB
from manavault.services.catalog_client import ScryfallClient
from manavault.services.catalog_resolver import CatalogResolver
from manavault.services.import_service import ImportService

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_catalog_client(request: Request) -> ScryfallClient:
    client: ScryfallClient | None = getattr(request.app.state, "catalog_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Card catalog client is not initialized",
        )
    return client


CatalogClientDep = Annotated[ScryfallClient, Depends(get_catalog_client)]


def get_resolver(client: CatalogClientDep) -> CatalogResolver:
    return CatalogResolver(client)


ResolverDep = Annotated[CatalogResolver, Depends(get_resolver)]


def get_import_service(resolver: ResolverDep) -> ImportService:
    return ImportService(resolver)


ImportServiceDep = Annotated[ImportService, Depends(get_import_service)]


async def get_owned_collection(
    user_id: str,
    collection_id: int,
    session: SessionDep,
) -> CollectionDB:
    """
    Load a collection from the path and check it belongs to user_id.

    Raises:
        HTTPException: 404 if missing, 403 if owned by someone else
    """
    collection = await get_collection(session, collection_id)
    if collection is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Collection {collection_id} not found",
        )
    if collection.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Collection belongs to another user",
        )
    return collection


OwnedCollectionDep = Annotated[CollectionDB, Depends(get_owned_collection)]


async def load_entries_with_cards(
    session: AsyncSession,
    resolver: CatalogResolver,
    collection_id: int,
) -> tuple[list[CollectionEntryDB], dict[str, CatalogCard]]:
    """All entries of a collection plus their catalog data (strict fetch)."""
    entries = await list_entries(session, collection_id)
    cards = await resolver.fetch_cards_by_id(entry.scryfall_id for entry in entries)
    return entries, cards
