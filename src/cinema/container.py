"""Process-wide service container.

Builds the single instance of every service and owns their lifecycle: the
persistent store starts initialising in the background, the response cache
sweep and the image disk sweep are scheduled, and everything is released
again on ``close``.
"""

import asyncio

from cinema.config import Settings, get_settings
from cinema.controllers import (
    BookmarksController,
    NowPlayingMoviesController,
    SearchController,
    TrendingMoviesController,
)
from cinema.core.database import close_db, start_db_init
from cinema.core.logging import get_logger
from cinema.deeplink import DeepLinkHandler
from cinema.services.bookmarks import BookmarkStore
from cinema.services.catalog import CatalogService
from cinema.services.image_cache import ImageCache
from cinema.services.remote import RemoteClient
from cinema.services.response_cache import ResponseCache

logger = get_logger(__name__)


class AppContainer:
    """Holds the shared services.

    Usage:
        ```python
        container = AppContainer(settings)
        await container.start()
        movies = await container.catalog.get_trending_movies()
        await container.close()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.remote = RemoteClient(self.settings)
        self.response_cache = ResponseCache(self.settings)
        self.bookmarks = BookmarkStore(self.settings)
        self.images = ImageCache(self.settings)
        self.catalog = CatalogService(self.remote, self.response_cache)
        self.deep_links = DeepLinkHandler(self.settings)
        self._sweep_task: asyncio.Task[None] | None = None
        self._started = False

    # -------------------------------------------------------------------------
    # Controller factories
    # -------------------------------------------------------------------------

    def trending_controller(self) -> TrendingMoviesController:
        return TrendingMoviesController(self.catalog, self.bookmarks, self.settings)

    def now_playing_controller(self) -> NowPlayingMoviesController:
        return NowPlayingMoviesController(self.catalog, self.bookmarks, self.settings)

    def search_controller(self) -> SearchController:
        return SearchController(self.catalog, self.bookmarks, self.settings)

    def bookmarks_controller(self) -> BookmarksController:
        return BookmarksController(self.bookmarks)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Start background initialisation. Returns without waiting for it."""
        if self._started:
            return
        self._started = True

        start_db_init(self.settings)
        self.images.start()

        interval = self.settings.response_cache_sweep_interval
        if interval > 0:
            self._sweep_task = asyncio.create_task(
                self.response_cache.run_periodic_sweep(interval),
                name="response-cache-sweep",
            )

        logger.info("container_started", sweep_interval=interval)

    async def close(self) -> None:
        if not self._started:
            return
        self._started = False

        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

        await self.response_cache.drain()
        await self.images.close()
        await self.remote.close()
        await close_db()

        logger.info("container_closed")
