"""Tests for the list controllers.

The catalog is an AsyncMock so every scenario controls exactly what each
page request returns and when.
"""

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinema.config import Settings
from cinema.controllers import (
    BookmarksController,
    NowPlayingMoviesController,
    SearchController,
    TrendingMoviesController,
)
from cinema.controllers.bookmarks import EMPTY_MESSAGE
from cinema.core.exceptions import NoInternetError, ServerError
from cinema.schemas.movie import Movie
from cinema.services.bookmarks import BookmarkStore

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def movies(movie_factory: Callable[..., Movie]) -> Callable[[int, int], list[Movie]]:
    """Build ``count`` movies with ids starting at ``start``."""

    def _make(count: int, start: int = 1) -> list[Movie]:
        return [movie_factory(start + i) for i in range(count)]

    return _make


@pytest.fixture
def catalog() -> MagicMock:
    """Create a mock catalog."""
    mock = MagicMock()
    mock.get_movies = AsyncMock(return_value=[])
    mock.get_trending_movies = AsyncMock(return_value=[])
    mock.get_now_playing_movies = AsyncMock(return_value=[])
    mock.search_movies = AsyncMock(return_value=[])
    mock.get_movie_details = AsyncMock()
    return mock


@pytest.fixture
def trending(catalog: MagicMock, test_settings: Settings) -> TrendingMoviesController:
    return TrendingMoviesController(catalog, settings=test_settings)


@pytest.fixture
def search(catalog: MagicMock, test_settings: Settings) -> SearchController:
    return SearchController(catalog, settings=test_settings)


# =============================================================================
# Initial Load Tests
# =============================================================================


class TestLoadInitial:
    """Tests for the first page load."""

    @pytest.mark.asyncio
    async def test_full_page_means_more(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.return_value = movies(20)

        await trending.load_initial()

        assert trending.has_more is True
        assert len(trending.movies) == 20
        assert trending.current_page == 1
        catalog.get_trending_movies.assert_awaited_once_with(page=1)

    @pytest.mark.asyncio
    async def test_short_page_is_last(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.return_value = movies(15)

        await trending.load_initial()

        assert trending.has_more is False
        assert len(trending.movies) == 15

    @pytest.mark.asyncio
    async def test_empty_page_sets_message(
        self, trending: TrendingMoviesController, catalog: MagicMock
    ) -> None:
        catalog.get_trending_movies.return_value = []

        await trending.load_initial()

        assert trending.has_more is False
        assert trending.movies == []
        assert trending.error_message == "No movies found"

    @pytest.mark.asyncio
    async def test_two_movies_scenario(
        self,
        trending: TrendingMoviesController,
        catalog: MagicMock,
        movie_factory: Callable[..., Movie],
    ) -> None:
        m1, m2 = movie_factory(1), movie_factory(2)
        catalog.get_trending_movies.return_value = [m1, m2]

        await trending.load_initial()

        assert trending.movies == [m1, m2]
        assert trending.has_more is False
        assert trending.is_loading is False
        assert trending.error_message is None

    @pytest.mark.asyncio
    async def test_failure_on_empty_list_shows_error(
        self, trending: TrendingMoviesController, catalog: MagicMock
    ) -> None:
        catalog.get_trending_movies.side_effect = ServerError("boom")

        await trending.load_initial()

        assert trending.movies == []
        assert trending.is_loading is False
        assert "boom" in trending.error_message

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_existing_list(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.return_value = movies(20)
        await trending.load_initial()

        catalog.get_trending_movies.side_effect = NoInternetError()
        await trending.refresh()

        assert len(trending.movies) == 20
        assert trending.error_message is None
        assert trending.is_loading is False

    @pytest.mark.asyncio
    async def test_is_loading_cleared_on_cancel(
        self, trending: TrendingMoviesController, catalog: MagicMock
    ) -> None:
        started = asyncio.Event()

        async def hang(page: int = 1) -> list[Movie]:
            started.set()
            await asyncio.Event().wait()
            return []

        catalog.get_trending_movies.side_effect = hang
        task = asyncio.create_task(trending.load_initial())
        await started.wait()
        assert trending.is_loading is True

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert trending.is_loading is False

    @pytest.mark.asyncio
    async def test_now_playing_uses_its_endpoint(
        self, catalog: MagicMock, test_settings: Settings, movies
    ) -> None:
        catalog.get_now_playing_movies.return_value = movies(3)
        controller = NowPlayingMoviesController(catalog, settings=test_settings)

        await controller.load_initial()

        catalog.get_now_playing_movies.assert_awaited_once_with(page=1)
        catalog.get_trending_movies.assert_not_awaited()
        assert len(controller.movies) == 3


# =============================================================================
# Load More Tests
# =============================================================================


class TestLoadMore:
    """Tests for incremental pages."""

    @pytest.mark.asyncio
    async def test_appends_next_page(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.side_effect = [movies(20, 1), movies(5, 101)]

        await trending.load_initial()
        await trending.load_more()

        assert len(trending.movies) == 25
        assert trending.movies[20].id == 101
        assert trending.current_page == 2
        assert trending.has_more is False
        assert trending.is_loading_more is False
        catalog.get_trending_movies.assert_awaited_with(page=2)

    @pytest.mark.asyncio
    async def test_noop_without_more(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.return_value = movies(3)
        await trending.load_initial()

        await trending.load_more()

        assert len(trending.movies) == 3
        assert trending.current_page == 1
        assert catalog.get_trending_movies.await_count == 1

    @pytest.mark.asyncio
    async def test_duplicates_are_kept(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.side_effect = [movies(20, 1), movies(20, 1)]

        await trending.load_initial()
        await trending.load_more()

        assert len(trending.movies) == 40
        assert trending.movies[0] == trending.movies[20]

    @pytest.mark.asyncio
    async def test_failure_keeps_earlier_pages(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.side_effect = [movies(20), ServerError("boom")]

        await trending.load_initial()
        await trending.load_more()

        assert len(trending.movies) == 20
        assert trending.current_page == 1
        assert trending.error_message is None
        assert trending.is_loading_more is False

    @pytest.mark.asyncio
    async def test_concurrent_load_more_fetches_once(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        release = asyncio.Event()
        first_page = movies(20, 1)

        async def fetch(page: int = 1) -> list[Movie]:
            if page == 1:
                return first_page
            await release.wait()
            return movies(20, 101)

        catalog.get_trending_movies.side_effect = fetch
        await trending.load_initial()

        task = asyncio.create_task(trending.load_more())
        await asyncio.sleep(0)
        await trending.load_more()
        release.set()
        await task

        assert catalog.get_trending_movies.await_count == 2
        assert len(trending.movies) == 40


# =============================================================================
# Stale Response Tests
# =============================================================================


class TestStaleResponses:
    """A superseded load never overwrites newer state."""

    @pytest.mark.asyncio
    async def test_slow_first_load_is_dropped(
        self,
        trending: TrendingMoviesController,
        catalog: MagicMock,
        movie_factory: Callable[..., Movie],
    ) -> None:
        gates = [asyncio.Event(), asyncio.Event()]
        results = [[movie_factory(1)], [movie_factory(2)]]
        calls = 0

        async def fetch(page: int = 1) -> list[Movie]:
            nonlocal calls
            index = calls
            calls += 1
            await gates[index].wait()
            return results[index]

        catalog.get_trending_movies.side_effect = fetch

        first = asyncio.create_task(trending.load_initial())
        await asyncio.sleep(0)
        second = asyncio.create_task(trending.load_initial())
        await asyncio.sleep(0)

        gates[1].set()
        await second
        gates[0].set()
        await first

        assert [m.id for m in trending.movies] == [2]
        assert trending.is_loading is False

    @pytest.mark.asyncio
    async def test_page_for_old_list_is_not_appended(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        release = asyncio.Event()

        async def fetch(page: int = 1) -> list[Movie]:
            if page == 2:
                await release.wait()
                return movies(20, 101)
            return movies(20, 1)

        catalog.get_trending_movies.side_effect = fetch
        await trending.load_initial()

        more = asyncio.create_task(trending.load_more())
        await asyncio.sleep(0)
        await trending.refresh()
        release.set()
        await more

        assert len(trending.movies) == 20
        assert trending.current_page == 1
        assert trending.is_loading_more is False


# =============================================================================
# Notification Tests
# =============================================================================


class TestNotifications:
    """Listeners observe state changes."""

    @pytest.mark.asyncio
    async def test_listener_sees_loading_then_loaded(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.return_value = movies(2)
        snapshots: list[tuple[bool, int]] = []

        unsubscribe = trending.subscribe(
            lambda c: snapshots.append((c.is_loading, len(c.movies)))
        )
        await trending.load_initial()
        unsubscribe()
        await trending.load_initial()

        assert snapshots == [(True, 0), (False, 2)]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_load(
        self, trending: TrendingMoviesController, catalog: MagicMock, movies
    ) -> None:
        catalog.get_trending_movies.return_value = movies(2)

        def broken(controller: TrendingMoviesController) -> None:
            raise RuntimeError("listener bug")

        trending.subscribe(broken)
        await trending.load_initial()

        assert len(trending.movies) == 2


# =============================================================================
# Bookmark Toggle Tests
# =============================================================================


class TestToggleBookmark:
    """List controllers can bookmark the movies they show."""

    @pytest.mark.asyncio
    async def test_toggle(
        self,
        catalog: MagicMock,
        test_settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        movie_factory: Callable[..., Movie],
    ) -> None:
        store = BookmarkStore(test_settings, session_factory=session_factory)
        controller = TrendingMoviesController(catalog, store, test_settings)
        movie = movie_factory(550)

        assert await controller.toggle_bookmark(movie) is True
        assert await controller.is_bookmarked(550) is True
        assert await controller.toggle_bookmark(movie) is False
        assert await controller.is_bookmarked(550) is False

    @pytest.mark.asyncio
    async def test_without_store(
        self, trending: TrendingMoviesController, movie_factory: Callable[..., Movie]
    ) -> None:
        assert await trending.toggle_bookmark(movie_factory(1)) is False
        assert await trending.is_bookmarked(1) is False


# =============================================================================
# Search Tests
# =============================================================================


class TestSearchController:
    """Debounced search."""

    @pytest.mark.asyncio
    async def test_rapid_keystrokes_issue_one_request(
        self, search: SearchController, catalog: MagicMock, movies
    ) -> None:
        catalog.search_movies.return_value = movies(3)

        search.search("a")
        search.search("ab")
        search.search("abc")
        await search.wait_for_search()

        catalog.search_movies.assert_awaited_once_with("abc", page=1)
        assert len(search.movies) == 3
        assert search.search_text == "abc"

    @pytest.mark.asyncio
    async def test_nothing_before_debounce_elapses(
        self, search: SearchController, catalog: MagicMock
    ) -> None:
        search.search("matrix")
        await asyncio.sleep(0)

        catalog.search_movies.assert_not_awaited()
        await search.wait_for_search()
        catalog.search_movies.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_blank_query_clears_without_request(
        self, search: SearchController, catalog: MagicMock, movies
    ) -> None:
        catalog.search_movies.return_value = movies(3)
        search.search("up")
        await search.wait_for_search()

        search.search("   ")
        await asyncio.sleep(search.debounce_seconds * 2)

        assert search.movies == []
        assert search.error_message is None
        assert catalog.search_movies.await_count == 1

    @pytest.mark.asyncio
    async def test_no_results_message_names_query(
        self, search: SearchController, catalog: MagicMock
    ) -> None:
        search.search("zzzz")
        await search.wait_for_search()

        assert search.error_message == "No movies found for 'zzzz'"

    @pytest.mark.asyncio
    async def test_in_flight_search_result_is_dropped(
        self,
        search: SearchController,
        catalog: MagicMock,
        movie_factory: Callable[..., Movie],
    ) -> None:
        gates = {"old": asyncio.Event(), "new": asyncio.Event()}
        started = asyncio.Event()

        async def fetch(query: str, page: int = 1) -> list[Movie]:
            started.set()
            await gates[query].wait()
            return [movie_factory(1 if query == "old" else 2)]

        catalog.search_movies.side_effect = fetch

        search.search("old")
        await started.wait()
        search.search("new")
        gates["new"].set()
        await search.wait_for_search()
        gates["old"].set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert [m.id for m in search.movies] == [2]

    @pytest.mark.asyncio
    async def test_erasing_query_drops_in_flight_result(
        self,
        search: SearchController,
        catalog: MagicMock,
        movie_factory: Callable[..., Movie],
    ) -> None:
        release = asyncio.Event()
        started = asyncio.Event()

        async def fetch(query: str, page: int = 1) -> list[Movie]:
            started.set()
            await release.wait()
            return [movie_factory(1)]

        catalog.search_movies.side_effect = fetch

        search.search("old")
        await started.wait()
        search.search("")
        release.set()
        await search.wait_for_search()

        assert search.search_text == ""
        assert search.movies == []
        assert search.is_loading is False
        assert search.error_message is None

    @pytest.mark.asyncio
    async def test_load_more_uses_active_query(
        self, search: SearchController, catalog: MagicMock, movies
    ) -> None:
        catalog.search_movies.side_effect = [movies(20, 1), movies(4, 101)]

        search.search("star")
        await search.wait_for_search()
        await search.load_more()

        assert len(search.movies) == 24
        catalog.search_movies.assert_awaited_with("star", page=2)

    @pytest.mark.asyncio
    async def test_load_more_without_query_is_noop(
        self, search: SearchController, catalog: MagicMock
    ) -> None:
        await search.load_more()
        await search.load_initial()

        catalog.search_movies.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clear_search_cancels_pending(
        self, search: SearchController, catalog: MagicMock, movies
    ) -> None:
        catalog.search_movies.return_value = movies(3)
        search.search("up")

        search.clear_search()
        await search.wait_for_search()

        catalog.search_movies.assert_not_awaited()
        assert search.search_text == ""
        assert search.movies == []
        assert search.is_loading is False


# =============================================================================
# Bookmarks Controller Tests
# =============================================================================


class TestBookmarksController:
    """The bookmarks screen."""

    @pytest.fixture
    def store(
        self,
        test_settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> BookmarkStore:
        return BookmarkStore(test_settings, session_factory=session_factory)

    @pytest.mark.asyncio
    async def test_empty_shows_message(self, store: BookmarkStore) -> None:
        controller = BookmarksController(store)

        await controller.load()

        assert controller.movies == []
        assert controller.error_message == EMPTY_MESSAGE
        assert controller.is_loading is False

    @pytest.mark.asyncio
    async def test_load_and_remove(
        self, store: BookmarkStore, movie_factory: Callable[..., Movie]
    ) -> None:
        movie = movie_factory(550)
        await store.save(movie)
        controller = BookmarksController(store)

        await controller.load()
        assert controller.movies == [movie]
        assert controller.error_message is None

        await controller.remove(movie)

        assert controller.movies == []
        assert controller.error_message == "No bookmarked movies yet"
        assert await controller.is_bookmarked(550) is False
