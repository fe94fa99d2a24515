"""BookmarkStore - durable set of user-bookmarked movies.

Bookmark errors never reach the caller: a store that is closed, not yet
initialised or failing behaves as "nothing bookmarked".
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinema.config import Settings, get_settings
from cinema.core.database import acquire_session_factory
from cinema.core.exceptions import StoreNotReadyError
from cinema.models.bookmark import BookmarkedMovie
from cinema.repositories.bookmark import BookmarkRepository
from cinema.schemas.movie import Movie

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BookmarkStore:
    """Save, remove and enumerate bookmarked movies.

    Usage:
        ```python
        store = BookmarkStore(settings)
        await store.save(movie)
        assert await store.is_bookmarked(movie.id)
        movies = await store.list()  # most recent first
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the store.

        Args:
            settings: Application settings (defaults to cached settings)
            session_factory: Explicit session factory; the process-wide store
                is used when omitted
            clock: Returns the current UTC time, injectable for tests
        """
        self._settings = settings or get_settings()
        self._session_factory = session_factory
        self._clock = clock
        self._write_lock = asyncio.Lock()

    async def _factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is not None:
            return self._session_factory
        return await acquire_session_factory(self._settings.store_ready_timeout)

    async def save(self, movie: Movie) -> bool:
        """Bookmark a movie. Saving an already bookmarked movie is a no-op.

        Returns:
            True if a new bookmark was created
        """
        try:
            factory = await self._factory()
            async with self._write_lock, factory() as session:
                created = await BookmarkRepository(session).insert_if_absent(
                    movie, self._clock()
                )
                await session.commit()
        except StoreNotReadyError:
            logger.warning("bookmark_store_not_ready", movie_id=movie.id)
            return False
        except Exception as e:
            logger.error("bookmark_save_failed", movie_id=movie.id, error=str(e))
            return False

        if created:
            logger.info("bookmark_saved", movie_id=movie.id, title=movie.title)
        else:
            logger.debug("bookmark_already_exists", movie_id=movie.id)
        return created

    async def remove(self, movie_id: int) -> int:
        """Delete every bookmark record for a movie.

        Returns:
            Number of records removed
        """
        try:
            factory = await self._factory()
            async with self._write_lock, factory() as session:
                removed = await BookmarkRepository(session).delete_by_movie_id(movie_id)
                await session.commit()
        except StoreNotReadyError:
            logger.warning("bookmark_store_not_ready", movie_id=movie_id)
            return 0
        except Exception as e:
            logger.error("bookmark_remove_failed", movie_id=movie_id, error=str(e))
            return 0

        logger.info("bookmark_removed", movie_id=movie_id, removed=removed)
        return removed

    async def is_bookmarked(self, movie_id: int) -> bool:
        """Check whether a movie is bookmarked. False on any storage error."""
        try:
            factory = await self._factory()
            async with factory() as session:
                return await BookmarkRepository(session).is_bookmarked(movie_id)
        except StoreNotReadyError:
            return False
        except Exception as e:
            logger.warning("bookmark_check_failed", movie_id=movie_id, error=str(e))
            return False

    async def list(self) -> list[Movie]:
        """Bookmarked movies ordered by save time, newest first.

        Returns an empty list on any storage error.
        """
        try:
            factory = await self._factory()
            async with factory() as session:
                rows = await BookmarkRepository(session).list_bookmarked()
        except StoreNotReadyError:
            return []
        except Exception as e:
            logger.warning("bookmark_list_failed", error=str(e))
            return []

        return [self._to_movie(row) for row in rows]

    @staticmethod
    def _to_movie(row: BookmarkedMovie) -> Movie:
        return Movie(
            id=row.movie_id,
            title=row.title or "",
            overview=row.overview or "",
            poster_path=row.poster_path,
            backdrop_path=row.backdrop_path,
            release_date=row.release_date or "",
            vote_average=row.vote_average,
            vote_count=row.vote_count,
            popularity=row.popularity,
        )
