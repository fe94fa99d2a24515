"""Paginated list controller.

One controller instance owns the state of one list (trending, now playing
or search results) and drives incremental fetch-and-append:

    Idle -> Loading(page 1) -> Loaded <-> LoadingMore(page n+1) -> Loaded
    Loaded -> ErrorShown   (only when nothing has been loaded yet)

All state mutations happen in coroutines awaited on the event loop, which
is the single UI-affinity context. Each ``load_initial`` starts a new
generation; a response that belongs to a superseded generation is dropped
so that a slow page-1 response cannot overwrite a newer list, and a slow
page-n response cannot be appended to a list that was reloaded meanwhile.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from cinema.config import Settings, get_settings
from cinema.core.exceptions import CatalogError
from cinema.schemas.movie import Movie
from cinema.services.bookmarks import BookmarkStore
from cinema.services.catalog import MovieCatalog

logger = structlog.get_logger(__name__)

Listener = Callable[["PaginatedListController"], None]


@dataclass
class ListState:
    """Observable state of one paginated list.

    ``movies`` accumulates pages in fetch order; duplicates across pages are
    kept as-is.
    """

    current_page: int = 1
    has_more: bool = True
    movies: list[Movie] = field(default_factory=list)
    is_loading: bool = False
    is_loading_more: bool = False
    error_message: str | None = None


class PaginatedListController:
    """Base class for controllers that page through a catalog list.

    Subclasses implement ``_fetch_page`` and may override ``_empty_message``.
    """

    kind: str = "list"
    empty_message: str = "No movies found"

    def __init__(
        self,
        catalog: MovieCatalog,
        bookmarks: BookmarkStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            catalog: Catalog the pages are fetched from
            bookmarks: Bookmark store used by ``toggle_bookmark``
            settings: Application settings (defaults to cached settings)
        """
        self.catalog = catalog
        self.bookmarks = bookmarks
        self._settings = settings or get_settings()
        self.state = ListState()
        self._generation = 0
        self._listeners: list[Listener] = []

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    @property
    def movies(self) -> list[Movie]:
        return self.state.movies

    @property
    def current_page(self) -> int:
        return self.state.current_page

    @property
    def has_more(self) -> bool:
        return self.state.has_more

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def is_loading_more(self) -> bool:
        return self.state.is_loading_more

    @property
    def error_message(self) -> str | None:
        return self.state.error_message

    @property
    def page_size(self) -> int:
        return self._settings.page_size

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A callable that unregisters the listener
        """
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
                logger.warning("listener_failed", kind=self.kind, error=str(e))

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def _fetch_page(self, page: int) -> list[Movie]:
        raise NotImplementedError

    def _empty_message(self) -> str:
        return self.empty_message

    async def load_initial(self) -> None:
        """Fetch page 1 and replace the list with it."""
        self._generation += 1
        generation = self._generation

        state = self.state
        state.current_page = 1
        state.has_more = True
        state.is_loading = True
        state.error_message = None
        self._notify()

        try:
            movies = await self._fetch_page(1)
        except CatalogError as e:
            if generation != self._generation:
                return
            logger.warning("list_load_failed", kind=self.kind, error_code=e.code)
            if not state.movies:
                state.error_message = e.message
        else:
            if generation != self._generation:
                logger.debug("list_stale_response_dropped", kind=self.kind, page=1)
                return
            state.movies = list(movies)
            state.current_page = 1
            state.has_more = len(movies) == self.page_size
            if not state.movies:
                state.error_message = self._empty_message()
            logger.info("list_loaded", kind=self.kind, count=len(movies))
        finally:
            if generation == self._generation:
                state.is_loading = False
                self._notify()

    async def load_more(self) -> None:
        """Fetch the next page and append it. No-op without more pages."""
        state = self.state
        if not state.has_more or state.is_loading_more:
            return

        generation = self._generation
        next_page = state.current_page + 1
        state.is_loading_more = True
        self._notify()

        try:
            movies = await self._fetch_page(next_page)
        except CatalogError as e:
            # Earlier pages stay visible; the failure is only logged
            logger.warning(
                "list_load_more_failed", kind=self.kind, page=next_page, error_code=e.code
            )
        else:
            if generation != self._generation:
                logger.debug(
                    "list_stale_response_dropped", kind=self.kind, page=next_page
                )
                return
            state.movies.extend(movies)
            state.current_page = next_page
            state.has_more = len(movies) == self.page_size
            logger.info(
                "list_page_appended", kind=self.kind, page=next_page, count=len(movies)
            )
        finally:
            state.is_loading_more = False
            self._notify()

    async def refresh(self) -> None:
        """Reload from page 1; any older in-flight response is ignored."""
        await self.load_initial()

    # -------------------------------------------------------------------------
    # Bookmarks
    # -------------------------------------------------------------------------

    async def is_bookmarked(self, movie_id: int) -> bool:
        if self.bookmarks is None:
            return False
        return await self.bookmarks.is_bookmarked(movie_id)

    async def toggle_bookmark(self, movie: Movie) -> bool:
        """Bookmark or un-bookmark a movie and notify listeners.

        Returns:
            The bookmark state after the toggle
        """
        if self.bookmarks is None:
            return False

        if await self.bookmarks.is_bookmarked(movie.id):
            await self.bookmarks.remove(movie.id)
        else:
            await self.bookmarks.save(movie)

        bookmarked = await self.bookmarks.is_bookmarked(movie.id)
        self._notify()
        return bookmarked
