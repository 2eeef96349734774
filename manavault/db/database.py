"""
Engine and session wiring for the collection store.

PostgreSQL (asyncpg) in production, SQLite (aiosqlite) for local runs and
tests. Collection deletes rely on ON DELETE CASCADE for entries and
shares, so SQLite connections switch foreign key enforcement on.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from manavault.config import settings
from manavault.models.db import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for a collection database URL.

    SQLite engines get foreign keys enabled on every connection; other
    backends get pre-ping so stale pooled connections are replaced.
    """
    if make_url(url).get_backend_name() == "sqlite":
        sqlite_engine = create_async_engine(url, echo=echo)
        event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.database_url, echo=settings.debug)

# Loaded rows stay readable after commit; import chunks commit mid-request
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: commit after the handler, roll back on database errors."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            logger.warning("Rolling back request transaction: %s", e)
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the collections, entries and shares tables if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
