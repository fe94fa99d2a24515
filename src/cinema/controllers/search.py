"""Search controller with debounced input.

Every keystroke calls ``search(text)``. The call replaces the debounce
token and cancels the pending timer; only a token that survives the whole
debounce window issues a request. Once the window has passed the request
is no longer cancelled by later keystrokes, but its response is dropped if
a newer search started in the meantime.
"""

from __future__ import annotations

import asyncio

import structlog

from cinema.config import Settings
from cinema.controllers.base import PaginatedListController
from cinema.core.logging import log_context
from cinema.schemas.movie import Movie
from cinema.services.bookmarks import BookmarkStore
from cinema.services.catalog import MovieCatalog

logger = structlog.get_logger(__name__)


class SearchController(PaginatedListController):
    """Paginated search results for the current query."""

    kind = "search"

    def __init__(
        self,
        catalog: MovieCatalog,
        bookmarks: BookmarkStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(catalog, bookmarks, settings)
        self.search_text = ""
        self._active_query = ""
        self._debounce_token: object | None = None
        # Task still inside the debounce window (cancellable)
        self._timer: asyncio.Task[None] | None = None
        # Most recent task, inside or past the window
        self._search_task: asyncio.Task[None] | None = None

    @property
    def debounce_seconds(self) -> float:
        return self._settings.search_debounce_seconds

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def search(self, query: str) -> None:
        """Record a keystroke and restart the debounce window.

        A blank query clears the results immediately without a request.
        """
        self.search_text = query
        self._cancel_timer()

        if not query.strip():
            self._abandon_results()
            return

        token = object()
        self._debounce_token = token
        self._timer = asyncio.create_task(
            self._run_after_delay(query, token), name="search-debounce"
        )
        self._search_task = self._timer

    async def wait_for_search(self) -> None:
        """Wait for the most recent debounced search to finish."""
        task = self._search_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    def clear_search(self) -> None:
        """Drop the query, the results and any pending search."""
        self.search_text = ""
        self._cancel_timer()
        self._abandon_results()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load_initial(self) -> None:
        if not self._active_query.strip():
            return
        await super().load_initial()

    async def load_more(self) -> None:
        if not self._active_query:
            return
        await super().load_more()

    async def _fetch_page(self, page: int) -> list[Movie]:
        return await self.catalog.search_movies(self._active_query, page=page)

    def _empty_message(self) -> str:
        return f"No movies found for '{self._active_query}'"

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    async def _run_after_delay(self, query: str, token: object) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if token is not self._debounce_token:
            return

        self._debounce_token = None
        self._timer = None
        logger.debug("search_debounce_fired", query=query)

        self._active_query = query
        # A new query starts from an empty list
        self.state.movies = []
        with log_context(search_query=query):
            await self.load_initial()

    def _cancel_timer(self) -> None:
        self._debounce_token = None
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _abandon_results(self) -> None:
        self._active_query = ""
        state = self.state
        state.movies = []
        state.current_page = 1
        state.has_more = True
        state.error_message = None
        state.is_loading = False
        state.is_loading_more = False
        # Responses still in flight belong to a superseded generation
        self._generation += 1
        self._notify()
