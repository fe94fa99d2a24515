"""Pytest configuration and fixtures for Cinema tests.

This module provides reusable fixtures for:
- Settings overrides
- An isolated SQLite store per test
- Movie samples
- Async test client against the FastAPI app
"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cinema.config import Settings
from cinema.container import AppContainer
from cinema.main import create_app
from cinema.models import Base
from cinema.schemas.movie import Movie
from tests.mocks.tmdb_responses import make_movie

# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test-specific settings.

    Uses an in-memory store, a temporary image directory and a short
    search debounce.
    """
    return Settings(
        app_env="development",  # type: ignore[arg-type]
        debug=False,
        log_level="DEBUG",  # type: ignore[arg-type]
        log_format="console",  # type: ignore[arg-type]
        tmdb_api_key="test-api-key",  # type: ignore[arg-type]
        tmdb_base_url="https://api.test/3",
        image_base_url="https://images.test/t/p",
        database_url="sqlite+aiosqlite:///:memory:",
        store_ready_timeout=0,
        response_cache_sweep_interval=0,
        image_cache_dir=str(tmp_path / "images"),
        search_debounce_seconds=0.05,
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create an isolated in-memory store with every table.

    Usage:
        async def test_store(session_factory):
            store = BookmarkStore(settings, session_factory=session_factory)
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

    await engine.dispose()


# =============================================================================
# Movie Fixtures
# =============================================================================


@pytest.fixture
def movie_factory() -> Callable[..., Movie]:
    """Build Movie instances from ids.

    Usage:
        def test_something(movie_factory):
            movie = movie_factory(550, title="Fight Club")
    """

    def _make(movie_id: int, **overrides: Any) -> Movie:
        return Movie.model_validate({**make_movie(movie_id), **overrides})

    return _make


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def container(test_settings: Settings) -> AppContainer:
    """An unstarted container; tests replace services as needed."""
    return AppContainer(test_settings)


@pytest.fixture
def app(test_settings: Settings, container: AppContainer) -> FastAPI:
    """Create a test FastAPI application with test settings."""
    return create_app(settings=test_settings, container=container)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing.

    The lifespan does not run, so the persistent store is never started
    unless a test wires one in.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
