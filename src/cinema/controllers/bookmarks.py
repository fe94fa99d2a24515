"""Controller for the bookmarked movies screen."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from cinema.schemas.movie import Movie
from cinema.services.bookmarks import BookmarkStore

logger = structlog.get_logger(__name__)

EMPTY_MESSAGE = "No bookmarked movies yet"


class BookmarksController:
    """Holds the bookmarked movie list, newest first.

    The store never raises, so the only "error" shown is the empty state.
    """

    def __init__(self, store: BookmarkStore) -> None:
        self.store = store
        self.movies: list[Movie] = []
        self.is_loading = False
        self.error_message: str | None = None
        self._listeners: list[Callable[[BookmarksController], None]] = []

    def subscribe(self, listener: Callable[[BookmarksController], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.warning("listener_failed", kind="bookmarks", error=str(e))

    async def load(self) -> None:
        self.is_loading = True
        self.error_message = None
        self._notify()

        try:
            self.movies = await self.store.list()
        finally:
            self.is_loading = False

        if not self.movies:
            self.error_message = EMPTY_MESSAGE
        self._notify()

    async def refresh(self) -> None:
        await self.load()

    async def remove(self, movie: Movie) -> None:
        """Un-bookmark a movie and reload the list."""
        await self.store.remove(movie.id)
        await self.load()

    async def is_bookmarked(self, movie_id: int) -> bool:
        return await self.store.is_bookmarked(movie_id)
