"""Controllers for the trending and now-playing lists."""

from cinema.controllers.base import PaginatedListController
from cinema.schemas.movie import Movie


class TrendingMoviesController(PaginatedListController):
    """Pages through this week's trending movies."""

    kind = "trending"

    async def _fetch_page(self, page: int) -> list[Movie]:
        return await self.catalog.get_trending_movies(page=page)


class NowPlayingMoviesController(PaginatedListController):
    """Pages through movies currently in theatres."""

    kind = "now_playing"

    async def _fetch_page(self, page: int) -> list[Movie]:
        return await self.catalog.get_now_playing_movies(page=page)
