"""Async database session management.

The remote store is reached through two kinds of sessions:

1. **get_db()** - request-scoped dependency that commits on success and
   rolls back on ``SQLAlchemyError``. Used by the auth and hero endpoints.

2. **get_session_factory()** - the factory handed to the ``CollectionStore``,
   which opens one short transaction per remote write so that the in-memory
   cache is only mutated after the commit succeeded::

       async with session_factory() as session, session.begin():
           session.add(Category(...))
       # committed here; now update the cache
"""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from collectibles.config.settings import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_engine() -> AsyncEngine:
    """Get the database engine (lazily initialized)."""
    settings = get_settings()
    return create_async_engine(
        settings.async_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        echo=settings.database_echo,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the async session factory (lazily initialized)."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency that provides a database session.

    Yields an async session and handles commit/rollback automatically.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def get_db_no_commit() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency that provides a read-only database session."""
    async with get_session_factory()() as session:
        try:
            yield session
        except SQLAlchemyError:
            await session.rollback()
            raise
