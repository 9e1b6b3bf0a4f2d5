"""
Database connection and session management.

Provides the async SQLAlchemy engine and session factory the repositories
draw their connections from. PostgreSQL goes through asyncpg with a
connection pool; SQLite goes through aiosqlite.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rental.core.config import settings
from rental.db.models import Base

logger = logging.getLogger(__name__)

_async_engine: AsyncEngine | None = None
_async_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # aiosqlite hands the connection to a worker thread
        return {"echo": settings.db_echo, "connect_args": {"check_same_thread": False}}

    return {
        "echo": settings.db_echo,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
        "pool_pre_ping": True,  # Verify connections before use
        "connect_args": {"server_settings": {"timezone": "UTC"}, "timeout": 30},
    }


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on foreign-key enforcement for every new SQLite connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_fresh_async_engine(url: str | None = None, **overrides: Any) -> AsyncEngine:
    """Create a fresh async engine without caching.

    Used by scripts and tests that need an engine bound to their own event loop.
    """
    url = url or settings.async_url
    if not url:
        raise RuntimeError("DATABASE_URL is required")

    engine = create_async_engine(url, **{**_engine_kwargs(url), **overrides})
    if url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    return engine


def get_async_engine() -> AsyncEngine:
    """
    Create and configure the shared async SQLAlchemy engine.

    Returns:
        Configured async SQLAlchemy engine
    """
    global _async_engine

    if _async_engine is not None:
        return _async_engine

    _async_engine = create_fresh_async_engine()
    logger.info("Created database engine", extra={"dialect": _async_engine.dialect.name})
    return _async_engine


def get_async_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """
    Get or create the async sessionmaker.

    Returns:
        Async sessionmaker factory
    """
    global _async_sessionmaker
    if _async_sessionmaker is not None:
        return _async_sessionmaker

    _async_sessionmaker = async_sessionmaker(
        bind=get_async_engine(),
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
    return _async_sessionmaker


async def reset_async_engine() -> None:
    """Reset the async database engine and sessionmaker.

    Useful for tests to ensure fresh connections on new event loops.
    """
    global _async_engine, _async_sessionmaker

    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_sessionmaker = None


@asynccontextmanager
async def get_async_db_session() -> AsyncIterator[AsyncSession]:
    """Unit-of-work session: commits on success, rolls back on error.

    Usage:
        async with get_async_db_session() as db:
            db.add(User(login="alice"))

    Yields:
        Async database session
    """
    session_maker = get_async_sessionmaker()
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_database(engine: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema initialized")


async def drop_database(engine: AsyncEngine | None = None) -> None:
    """Drop all tables known to the ORM."""
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("Database schema dropped")
