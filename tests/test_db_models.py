"""Tests for SQLAlchemy ORM models."""

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from manavault.models.collection import CollectionType, Condition, DeckType, Finish, Visibility
from manavault.models.db import CollectionDB, CollectionEntryDB, CollectionShareDB


async def add_collection(session: AsyncSession, **fields) -> CollectionDB:
    values = {"user_id": "user-1", "name": "Binder", "type": CollectionType.TRADE_BINDER}
    values.update(fields)
    collection = CollectionDB(**values)
    session.add(collection)
    await session.flush()
    return collection


class TestCollectionDB:
    async def test_create_collection(self, session: AsyncSession) -> None:
        """Defaults and server timestamps are populated on insert."""
        collection = await add_collection(session)
        await session.commit()

        result = await session.execute(select(CollectionDB).where(CollectionDB.user_id == "user-1"))
        saved = result.scalar_one()

        assert saved.id is not None
        assert saved.visibility == Visibility.PRIVATE
        assert saved.share_slug is None
        assert saved.created_at is not None
        assert saved is collection

    async def test_enum_values_stored(self, session: AsyncSession) -> None:
        await add_collection(session, type=CollectionType.DECK, deck_type=DeckType.PLANAR_STANDARD)
        await session.commit()

        result = await session.execute(select(CollectionDB.deck_type))

        assert result.scalar_one() == DeckType.PLANAR_STANDARD

    async def test_share_slug_unique(self, session: AsyncSession) -> None:
        await add_collection(session, share_slug="same")
        await session.commit()

        session.add(
            CollectionDB(
                user_id="user-2", name="Other", type=CollectionType.TRADE_BINDER, share_slug="same"
            )
        )

        with pytest.raises(IntegrityError):
            await session.commit()


class TestCollectionEntryDB:
    async def test_create_entry(self, session: AsyncSession) -> None:
        collection = await add_collection(session)
        entry = CollectionEntryDB(
            collection_id=collection.id,
            scryfall_id="abc",
            quantity=4,
            purchase_price=1.25,
        )
        session.add(entry)
        await session.commit()

        result = await session.execute(select(CollectionEntryDB))
        saved = result.scalar_one()

        assert saved.quantity == 4
        assert saved.condition == Condition.NM
        assert saved.finish == Finish.NONFOIL
        assert saved.purchase_price == 1.25
        assert saved.is_commander is False
        assert saved.created_at is not None

    async def test_same_card_may_repeat(self, session: AsyncSession) -> None:
        """Entries are not unique per card; aggregation is the import's job."""
        collection = await add_collection(session)
        session.add_all(
            [
                CollectionEntryDB(collection_id=collection.id, scryfall_id="abc", quantity=1),
                CollectionEntryDB(collection_id=collection.id, scryfall_id="abc", quantity=2),
            ]
        )
        await session.commit()

        result = await session.execute(select(CollectionEntryDB))

        assert len(result.scalars().all()) == 2


class TestCollectionShareDB:
    async def test_share_unique_per_user(self, session: AsyncSession) -> None:
        collection = await add_collection(session)
        session.add(CollectionShareDB(collection_id=collection.id, shared_with_user_id="friend"))
        await session.commit()

        session.add(CollectionShareDB(collection_id=collection.id, shared_with_user_id="friend"))

        with pytest.raises(IntegrityError):
            await session.commit()


class TestForeignKeys:
    async def test_delete_statement_cascades_to_children(self, session: AsyncSession) -> None:
        """ON DELETE CASCADE applies even without the ORM relationship cascade."""
        collection = await add_collection(session)
        session.add(CollectionEntryDB(collection_id=collection.id, scryfall_id="abc", quantity=1))
        session.add(CollectionShareDB(collection_id=collection.id, shared_with_user_id="friend"))
        await session.commit()

        await session.execute(delete(CollectionDB).where(CollectionDB.id == collection.id))
        await session.commit()

        entries = await session.execute(select(func.count(CollectionEntryDB.id)))
        shares = await session.execute(select(func.count(CollectionShareDB.id)))
        assert entries.scalar_one() == 0
        assert shares.scalar_one() == 0

    async def test_entry_requires_existing_collection(self, session: AsyncSession) -> None:
        session.add(CollectionEntryDB(collection_id=999, scryfall_id="abc", quantity=1))

        with pytest.raises(IntegrityError):
            await session.commit()
