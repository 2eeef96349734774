"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models in manavault.models.collection.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from manavault.models.collection import (
    CollectionType,
    Condition,
    DeckType,
    Finish,
    Visibility,
)


def _enum_column(enum_cls: type[PyEnum], name: str) -> Enum:
    # Store enum values (e.g. "nonfoil"), not member names
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CollectionDB(Base):
    """
    A user's trade binder or deck.

    Entries and shares are owned by the collection and deleted with it.
    """

    __tablename__ = "collections"
    # Fetch server-generated timestamps on flush; async sessions cannot lazy-load them
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    type: Mapped[CollectionType] = mapped_column(_enum_column(CollectionType, "collection_type"))
    deck_type: Mapped[DeckType | None] = mapped_column(
        _enum_column(DeckType, "deck_type"), nullable=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[Visibility] = mapped_column(
        _enum_column(Visibility, "visibility"), default=Visibility.PRIVATE
    )
    share_slug: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    entries: Mapped[list["CollectionEntryDB"]] = relationship(
        back_populates="collection", cascade="all, delete-orphan"
    )
    shares: Mapped[list["CollectionShareDB"]] = relationship(
        back_populates="collection", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<CollectionDB(id={self.id}, user_id={self.user_id}, name={self.name})>"


class CollectionEntryDB(Base):
    """
    One card entry in a collection.

    The Scryfall ID references the external catalog; it is not a foreign key.
    """

    __tablename__ = "collection_entries"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collections.id", ondelete="CASCADE"), index=True
    )
    scryfall_id: Mapped[str] = mapped_column(String(36), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    condition: Mapped[Condition] = mapped_column(
        _enum_column(Condition, "card_condition"), default=Condition.NM
    )
    finish: Mapped[Finish] = mapped_column(_enum_column(Finish, "finish"), default=Finish.NONFOIL)
    purchase_price: Mapped[float | None] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_commander: Mapped[bool] = mapped_column(Boolean, default=False)
    is_sideboard: Mapped[bool] = mapped_column(Boolean, default=False)
    is_signature_spell: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    collection: Mapped["CollectionDB"] = relationship(back_populates="entries")

    def __repr__(self) -> str:
        return f"<CollectionEntryDB(scryfall_id={self.scryfall_id}, qty={self.quantity})>"


class CollectionShareDB(Base):
    """An invitation letting another user view an INVITE_ONLY collection."""

    __tablename__ = "collection_shares"
    __table_args__ = (
        UniqueConstraint("collection_id", "shared_with_user_id", name="uq_collection_share"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collections.id", ondelete="CASCADE"), index=True
    )
    shared_with_user_id: Mapped[str] = mapped_column(String(255), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    collection: Mapped["CollectionDB"] = relationship(back_populates="shares")

    def __repr__(self) -> str:
        return (
            f"<CollectionShareDB(collection_id={self.collection_id}, "
            f"user={self.shared_with_user_id})>"
        )
