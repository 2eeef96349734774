"""
Database CRUD operations.

Async functions for collections, their entries and their shares. Functions
flush but never commit; the caller's session scope decides the transaction.
Input problems (bad quantities, oversized bulk requests, a deck type on a
trade binder) raise ValueError.
"""

import secrets
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from manavault.config import MAX_BULK_ENTRIES
from manavault.models.collection import (
    Collection,
    CollectionEntry,
    CollectionType,
    DeckType,
    Visibility,
)
from manavault.models.db import CollectionDB, CollectionEntryDB, CollectionShareDB
from manavault.models.import_item import AggregatedEntry

SHARE_SLUG_BYTES = 12

# Entry columns a partial update may change
UPDATABLE_ENTRY_FIELDS = frozenset(
    {
        "quantity",
        "condition",
        "finish",
        "purchase_price",
        "notes",
        "is_commander",
        "is_sideboard",
        "is_signature_spell",
    }
)


def _check_deck_type(collection_type: CollectionType, deck_type: DeckType | None) -> None:
    if collection_type == CollectionType.DECK and deck_type is None:
        raise ValueError("deck_type is required for DECK collections")
    if collection_type != CollectionType.DECK and deck_type is not None:
        raise ValueError("deck_type is only allowed for DECK collections")


def _check_quantity(quantity: int) -> None:
    if quantity < 1:
        raise ValueError(f"Quantity must be at least 1, got {quantity}")


# --- Collection Operations ---


async def create_collection(
    session: AsyncSession,
    user_id: str,
    name: str,
    collection_type: CollectionType,
    deck_type: DeckType | None = None,
    description: str | None = None,
) -> CollectionDB:
    """
    Create a collection owned by user_id.

    Raises:
        ValueError: If deck_type does not match the collection type
    """
    _check_deck_type(collection_type, deck_type)
    collection = CollectionDB(
        user_id=user_id,
        name=name,
        type=collection_type,
        deck_type=deck_type,
        description=description,
        visibility=Visibility.PRIVATE,
    )
    session.add(collection)
    await session.flush()
    return collection


async def get_collection(session: AsyncSession, collection_id: int) -> CollectionDB | None:
    """Get a collection by ID (entries not loaded)."""
    result = await session.execute(select(CollectionDB).where(CollectionDB.id == collection_id))
    return result.scalar_one_or_none()


async def get_collection_by_slug(session: AsyncSession, slug: str) -> CollectionDB | None:
    result = await session.execute(select(CollectionDB).where(CollectionDB.share_slug == slug))
    return result.scalar_one_or_none()


async def list_collections(
    session: AsyncSession, user_id: str
) -> list[tuple[CollectionDB, int, int]]:
    """
    List a user's collections with entry counts.

    Returns:
        (collection, entry count, total card quantity) tuples, oldest first.
    """
    entry_count = func.count(CollectionEntryDB.id)
    card_count = func.coalesce(func.sum(CollectionEntryDB.quantity), 0)
    result = await session.execute(
        select(CollectionDB, entry_count, card_count)
        .outerjoin(CollectionEntryDB, CollectionEntryDB.collection_id == CollectionDB.id)
        .where(CollectionDB.user_id == user_id)
        .group_by(CollectionDB.id)
        .order_by(CollectionDB.id)
    )
    return [(row[0], int(row[1]), int(row[2])) for row in result.all()]


async def update_collection(
    session: AsyncSession,
    collection: CollectionDB,
    name: str | None = None,
    description: str | None = None,
    deck_type: DeckType | None = None,
) -> CollectionDB:
    """
    Update name, description and deck type. None leaves a field unchanged.

    Raises:
        ValueError: If deck_type is given for a non-DECK collection
    """
    if deck_type is not None:
        _check_deck_type(collection.type, deck_type)
        collection.deck_type = deck_type
    if name is not None:
        collection.name = name
    if description is not None:
        collection.description = description
    await session.flush()
    return collection


async def delete_collection(session: AsyncSession, collection_id: int) -> bool:
    """
    Delete a collection with its entries and shares.

    Returns True if deleted, False if not found.
    """
    result = await session.execute(
        select(CollectionDB)
        .where(CollectionDB.id == collection_id)
        .options(selectinload(CollectionDB.entries), selectinload(CollectionDB.shares))
        .execution_options(populate_existing=True)
    )
    collection = result.scalar_one_or_none()
    if not collection:
        return False

    await session.delete(collection)
    await session.flush()
    return True


def collection_to_model(collection: CollectionDB) -> Collection:
    """Convert a database collection to a domain model."""
    return Collection(
        id=collection.id,
        user_id=collection.user_id,
        name=collection.name,
        type=collection.type,
        deck_type=collection.deck_type,
        description=collection.description,
        visibility=collection.visibility,
        share_slug=collection.share_slug,
    )


# --- Entry Operations ---


async def count_entries(session: AsyncSession, collection_id: int) -> int:
    result = await session.execute(
        select(func.count(CollectionEntryDB.id)).where(
            CollectionEntryDB.collection_id == collection_id
        )
    )
    return int(result.scalar_one())


async def list_entries(
    session: AsyncSession,
    collection_id: int,
    offset: int = 0,
    limit: int | None = None,
) -> list[CollectionEntryDB]:
    """Entries of a collection in creation order; all of them when limit is None."""
    query = (
        select(CollectionEntryDB)
        .where(CollectionEntryDB.collection_id == collection_id)
        .order_by(CollectionEntryDB.id)
        .offset(offset)
    )
    if limit is not None:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_entry(
    session: AsyncSession, collection_id: int, entry_id: int
) -> CollectionEntryDB | None:
    """Get an entry, only if it belongs to the given collection."""
    result = await session.execute(
        select(CollectionEntryDB).where(
            CollectionEntryDB.id == entry_id,
            CollectionEntryDB.collection_id == collection_id,
        )
    )
    return result.scalar_one_or_none()


def _entry_row(collection_id: int, entry: AggregatedEntry) -> CollectionEntryDB:
    _check_quantity(entry.quantity)
    return CollectionEntryDB(
        collection_id=collection_id,
        scryfall_id=entry.scryfall_id,
        quantity=entry.quantity,
        condition=entry.condition,
        finish=entry.finish,
        purchase_price=entry.purchase_price,
        notes=entry.notes,
        is_commander=entry.is_commander,
        is_sideboard=entry.is_sideboard,
        is_signature_spell=entry.is_signature_spell,
    )


async def create_entry(
    session: AsyncSession, collection_id: int, entry: AggregatedEntry
) -> CollectionEntryDB:
    """
    Add one entry to a collection.

    Raises:
        ValueError: If quantity is below 1
    """
    row = _entry_row(collection_id, entry)
    session.add(row)
    await session.flush()
    return row


async def bulk_create_entries(
    session: AsyncSession,
    collection_id: int,
    entries: Sequence[AggregatedEntry],
) -> list[CollectionEntryDB]:
    """
    Create one row per entry, as given. No aggregation happens here.

    Raises:
        ValueError: If entries is empty, exceeds MAX_BULK_ENTRIES, or any
            quantity is below 1. Nothing is written in that case.
    """
    if not entries:
        raise ValueError("At least one entry is required")
    if len(entries) > MAX_BULK_ENTRIES:
        raise ValueError(f"At most {MAX_BULK_ENTRIES} entries per request, got {len(entries)}")

    rows = [_entry_row(collection_id, entry) for entry in entries]
    session.add_all(rows)
    await session.flush()
    return rows


async def update_entry(
    session: AsyncSession, entry: CollectionEntryDB, changes: dict[str, Any]
) -> CollectionEntryDB:
    """
    Apply a partial update. Keys outside UPDATABLE_ENTRY_FIELDS are rejected.

    Raises:
        ValueError: On unknown fields or a quantity below 1
    """
    unknown = set(changes) - UPDATABLE_ENTRY_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if "quantity" in changes:
        _check_quantity(changes["quantity"])

    for field_name, value in changes.items():
        setattr(entry, field_name, value)
    await session.flush()
    # updated_at is regenerated by the database
    await session.refresh(entry)
    return entry


async def delete_entry(session: AsyncSession, collection_id: int, entry_id: int) -> bool:
    """
    Delete an entry.

    Returns True if deleted, False if not found in this collection.
    """
    result = await session.execute(
        delete(CollectionEntryDB).where(
            CollectionEntryDB.id == entry_id,
            CollectionEntryDB.collection_id == collection_id,
        )
    )
    return bool(result.rowcount)


def entry_to_model(entry: CollectionEntryDB) -> CollectionEntry:
    """Convert a database entry to a domain model."""
    return CollectionEntry(
        id=entry.id,
        collection_id=entry.collection_id,
        scryfall_id=entry.scryfall_id,
        quantity=entry.quantity,
        condition=entry.condition,
        finish=entry.finish,
        purchase_price=entry.purchase_price,
        notes=entry.notes,
        is_commander=entry.is_commander,
        is_sideboard=entry.is_sideboard,
        is_signature_spell=entry.is_signature_spell,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


# --- Sharing Operations ---


async def set_visibility(
    session: AsyncSession, collection: CollectionDB, visibility: Visibility
) -> CollectionDB:
    """
    Change visibility.

    A share slug is assigned the first time a collection leaves PRIVATE and
    is kept afterwards, so links stay stable across visibility changes.
    """
    collection.visibility = visibility
    if visibility != Visibility.PRIVATE and not collection.share_slug:
        collection.share_slug = secrets.token_urlsafe(SHARE_SLUG_BYTES)
    await session.flush()
    return collection


async def list_shares(session: AsyncSession, collection_id: int) -> list[str]:
    """User IDs the collection is shared with."""
    result = await session.execute(
        select(CollectionShareDB.shared_with_user_id)
        .where(CollectionShareDB.collection_id == collection_id)
        .order_by(CollectionShareDB.id)
    )
    return list(result.scalars().all())


async def add_share(session: AsyncSession, collection_id: int, user_id: str) -> bool:
    """
    Share a collection with a user.

    Returns True if added, False if it was already shared with them.
    """
    existing = await session.execute(
        select(CollectionShareDB.id).where(
            CollectionShareDB.collection_id == collection_id,
            CollectionShareDB.shared_with_user_id == user_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        return False

    session.add(CollectionShareDB(collection_id=collection_id, shared_with_user_id=user_id))
    await session.flush()
    return True


async def remove_share(session: AsyncSession, collection_id: int, user_id: str) -> bool:
    """Returns True if a share was removed."""
    result = await session.execute(
        delete(CollectionShareDB).where(
            CollectionShareDB.collection_id == collection_id,
            CollectionShareDB.shared_with_user_id == user_id,
        )
    )
    return bool(result.rowcount)


async def can_view_shared(
    session: AsyncSession, collection: CollectionDB, viewer_id: str | None
) -> bool:
    """
    Whether a viewer may open a collection through its share link.

    PUBLIC: anyone. INVITE_ONLY: the owner or an invited user.
    PRIVATE: nobody.
    """
    if collection.visibility == Visibility.PUBLIC:
        return True
    if collection.visibility == Visibility.PRIVATE or viewer_id is None:
        return False
    if viewer_id == collection.user_id:
        return True
    return viewer_id in await list_shares(session, collection.id)
