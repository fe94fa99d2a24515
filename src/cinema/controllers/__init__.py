"""Controllers package for Cinema.

Controllers own the state of one list each and are what a UI binds to.
"""

from cinema.controllers.base import ListState, PaginatedListController
from cinema.controllers.bookmarks import BookmarksController
from cinema.controllers.movies import NowPlayingMoviesController, TrendingMoviesController
from cinema.controllers.search import SearchController

__all__ = [
    "ListState",
    "PaginatedListController",
    "TrendingMoviesController",
    "NowPlayingMoviesController",
    "SearchController",
    "BookmarksController",
]
