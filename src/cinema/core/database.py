"""Async database engine and session management.

This module provides the persistent store behind the response cache and the
bookmark store:
- Async SQLAlchemy engine (SQLite via aiosqlite by default)
- Async session factory shared by every store
- Store lifecycle management (init/close) with a readiness flag

The store initialises in the background at process start. Consumers must
tolerate a store that is not ready yet, either by falling back to empty
results or by waiting a bounded amount of time with ``wait_for_db``.

Usage:
    from cinema.core.database import start_db_init, wait_for_db, close_db

    # At startup
    start_db_init(settings)

    # In a store
    if await wait_for_db(settings.store_ready_timeout):
        async with get_session_factory()() as session:
            ...

    # At shutdown
    await close_db()
"""

import asyncio
from pathlib import Path
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from cinema.config import Settings
from cinema.core.exceptions import StoreNotReadyError
from cinema.core.logging import get_logger

logger = get_logger(__name__)

# Global engine and session factory (initialized at startup)
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None
_init_task: asyncio.Task[None] | None = None

READY_POLL_INTERVAL = 0.05


def get_engine() -> AsyncEngine:
    """Get the database engine.

    Raises:
        StoreNotReadyError: If the store is not initialized
    """
    if _engine is None:
        raise StoreNotReadyError()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory.

    Raises:
        StoreNotReadyError: If the store is not initialized
    """
    if _async_session_factory is None:
        raise StoreNotReadyError()
    return _async_session_factory


def is_db_ready() -> bool:
    """Check whether the store finished initialising."""
    return _async_session_factory is not None


async def wait_for_db(timeout: float) -> bool:
    """Poll until the store is ready or ``timeout`` seconds pass.

    Args:
        timeout: Maximum seconds to wait (0 checks once)

    Returns:
        True if the store is ready, False on timeout
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not is_db_ready():
        if loop.time() >= deadline:
            return False
        await asyncio.sleep(READY_POLL_INTERVAL)
    return True


async def acquire_session_factory(timeout: float) -> async_sessionmaker[AsyncSession]:
    """Wait up to ``timeout`` seconds for the store, then return its factory.

    Raises:
        StoreNotReadyError: If the store is still not ready
    """
    if not await wait_for_db(timeout):
        raise StoreNotReadyError()
    return get_session_factory()


async def init_db(settings: Settings) -> None:
    """Initialize the database engine, session factory and tables.

    Args:
        settings: Application settings containing database configuration
    """
    global _engine, _async_session_factory

    from cinema.models import Base

    logger.info("db_initializing", database_url=_mask_password(settings.database_url))

    url = make_url(settings.database_url)
    engine_kwargs: dict[str, Any] = {"echo": settings.debug}

    if url.get_backend_name() == "sqlite":
        database = url.database or ""
        if database in ("", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty DB
            engine_kwargs["poolclass"] = StaticPool
        else:
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
            engine_kwargs["poolclass"] = NullPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(settings.database_url, **engine_kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    _engine = engine
    _async_session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info("db_initialized")


def start_db_init(settings: Settings) -> asyncio.Task[None]:
    """Schedule ``init_db`` in the background and return its task.

    Failures are logged; the store then stays "not ready" and every
    consumer keeps returning its fallback results.
    """
    global _init_task

    async def _run() -> None:
        try:
            await init_db(settings)
        except Exception as e:
            logger.error("db_init_failed", error=str(e))

    _init_task = asyncio.create_task(_run(), name="cinema-db-init")
    return _init_task


async def close_db() -> None:
    """Close the database engine and all connections."""
    global _engine, _async_session_factory, _init_task

    if _init_task is not None and not _init_task.done():
        _init_task.cancel()
        try:
            await _init_task
        except asyncio.CancelledError:
            pass
    _init_task = None

    if _engine is not None:
        logger.info("db_closing")
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("db_closed")


async def check_db_connection() -> bool:
    """Check if the database connection is working.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        engine = get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("db_health_check_failed", error=str(e))
        return False


def _mask_password(url: str) -> str:
    """Mask password in database URL for logging.

    Args:
        url: Database URL

    Returns:
        URL with password masked
    """
    return make_url(url).render_as_string(hide_password=True)
