"""Database session management for taskhub.

Provides async session management with connection pooling and
lifecycle management for the SQLAlchemy async ORM.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskhub.config import Settings, get_settings
from taskhub.db.base import Base

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest correctly on SQLite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores FOREIGN KEY constraints unless asked per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _foreign_keys_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_database_url() -> str:
    """Get database URL from settings (``TASKHUB_DATABASE_URL``)."""
    return get_settings().database_url


def init_db(database_url: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """Initialize the database engine and session maker.

    Args:
        database_url: Optional database URL. If not provided, uses
                     ``settings.database_url``.
        settings: Settings supplying echo and pool options. Defaults to
                  :func:`get_settings`.
    """
    global _engine, _async_session_maker

    if _engine is not None:
        return

    settings = settings or get_settings()
    url = database_url or settings.database_url

    engine_kwargs: dict[str, Any] = {"echo": settings.sql_echo}
    if not url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,   # Recycle connections after 1 hour
        )

    _engine = create_async_engine(url, **engine_kwargs)
    if _engine.dialect.name == "sqlite":
        enable_sqlite_savepoints(_engine)
        enable_sqlite_foreign_keys(_engine)
    _async_session_maker = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    logger.info("Database engine initialized (%s)", _engine.url.render_as_string(hide_password=True))


async def close_db() -> None:
    """Close the database engine and cleanup resources."""
    global _engine, _async_session_maker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_maker = None


async def create_tables() -> None:
    """Create all database tables.

    Note: In production, use migrations instead.
    This is useful for testing and development.
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    """Drop all database tables.

    Warning: This will delete all data. Use with caution.
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session as an async context manager.

    Usage:
        async with get_session() as session:
            result = await session.execute(...)

    Yields:
        AsyncSession: Database session that auto-commits on success
                      and rolls back on exception.
    """
    if _async_session_maker is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    session = _async_session_maker()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for request-scoped database sessions."""
    async with get_session() as session:
        yield session


def get_engine() -> AsyncEngine:
    """Get the current database engine.

    Raises:
        RuntimeError: If database hasn't been initialized.
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine
