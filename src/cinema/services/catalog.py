"""Movie catalog service.

Orchestrates the remote client and the response cache to produce pages of
movies and single-movie lookups. Raw transport failures are classified into
the CatalogError taxonomy before they leave this module.

Caching policy:
    - trending / now playing pages: read-through, write-through
    - search: never cached (query space too large, low reuse)
    - movie details: never cached
"""

import json
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog
from pydantic import ValidationError

from cinema.core.exceptions import (
    CatalogError,
    InvalidResponseError,
    InvalidURLError,
    MovieNotFoundError,
    NoInternetError,
    RequestTimeoutError,
    ServerError,
)
from cinema.schemas.movie import Movie, PageResponse
from cinema.services.remote import ModelT, RemoteClient
from cinema.services.response_cache import ResponseCache

logger = structlog.get_logger(__name__)

TRENDING_PATH = "/trending/movie/week"
NOW_PLAYING_PATH = "/movie/now_playing"
SEARCH_PATH = "/search/movie"
MOVIE_DETAILS_PATH = "/movie"


@runtime_checkable
class MovieCatalog(Protocol):
    """What list controllers need from a catalog.

    Every method raises CatalogError on failure.
    """

    async def get_movies(self) -> list[Movie]: ...

    async def get_trending_movies(self, page: int = 1) -> list[Movie]: ...

    async def get_now_playing_movies(self, page: int = 1) -> list[Movie]: ...

    async def search_movies(self, query: str, page: int = 1) -> list[Movie]: ...

    async def get_movie_details(self, movie_id: int) -> Movie: ...


def classify_error(error: Exception) -> CatalogError:
    """Map a raw transport/decoding failure onto the catalog taxonomy.

    Args:
        error: Exception raised by the remote client

    Returns:
        The CatalogError to raise in its place
    """
    if isinstance(error, CatalogError):
        return error
    if isinstance(error, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return InvalidURLError()
    if isinstance(error, httpx.TimeoutException):
        return RequestTimeoutError()
    if isinstance(error, httpx.NetworkError):
        return NoInternetError()
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return ServerError(f"HTTP {status} {error.response.reason_phrase}".strip())
    if isinstance(error, ValidationError):
        return InvalidResponseError(details={"errors": error.error_count()})
    if isinstance(error, json.JSONDecodeError):
        return ServerError(f"Malformed JSON body: {error.msg}")
    return ServerError(str(error) or type(error).__name__)


class CatalogService:
    """Catalog backed by the TMDB API and the persistent response cache.

    Usage:
        ```python
        service = CatalogService(remote_client, response_cache)
        movies = await service.get_now_playing_movies(page=2)
        ```
    """

    def __init__(self, client: RemoteClient, cache: ResponseCache) -> None:
        """Initialize the service.

        Args:
            client: Remote client used on cache misses
            cache: Response cache for list pages
        """
        self.client = client
        self.cache = cache

    async def get_movies(self) -> list[Movie]:
        """First page of trending movies."""
        return await self.get_trending_movies(page=1)

    async def get_trending_movies(self, page: int = 1) -> list[Movie]:
        return await self._get_cached_page(TRENDING_PATH, page)

    async def get_now_playing_movies(self, page: int = 1) -> list[Movie]:
        return await self._get_cached_page(NOW_PLAYING_PATH, page)

    async def search_movies(self, query: str, page: int = 1) -> list[Movie]:
        """Search movies by title. Always hits the network."""
        _check_page(page)
        response = await self._fetch(
            SEARCH_PATH, PageResponse, {"query": query, "page": page}
        )
        logger.info(
            "search_fetched", query=query, page=page, count=len(response.results)
        )
        return list(response.results)

    async def get_movie_details(self, movie_id: int) -> Movie:
        """Look up a single movie by id.

        Raises:
            MovieNotFoundError: The catalog has no such movie
            CatalogError: Any other failure
        """
        try:
            movie = await self._fetch(f"{MOVIE_DETAILS_PATH}/{movie_id}", Movie, None)
        except ServerError as e:
            if isinstance(e.__cause__, httpx.HTTPStatusError) and (
                e.__cause__.response.status_code == 404
            ):
                raise MovieNotFoundError(movie_id=movie_id) from e
            raise
        logger.info("movie_details_fetched", movie_id=movie_id)
        return movie

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    async def _get_cached_page(self, endpoint: str, page: int) -> list[Movie]:
        _check_page(page)
        params = {"page": page}
        fingerprint = ResponseCache.fingerprint(endpoint, params)

        cached = await self.cache.get(fingerprint)
        if cached is not None:
            logger.debug("catalog_cache_hit", fingerprint=fingerprint)
            return list(cached.results)

        response = await self._fetch(endpoint, PageResponse, params)
        self.cache.put(fingerprint, response)

        logger.info(
            "catalog_page_fetched",
            endpoint=endpoint,
            page=page,
            count=len(response.results),
        )
        return list(response.results)

    async def _fetch(
        self,
        endpoint: str,
        model: type[ModelT],
        params: Mapping[str, Any] | None,
    ) -> ModelT:
        try:
            return await self.client.get(endpoint, model, params)
        except Exception as e:
            error = classify_error(e)
            logger.warning(
                "catalog_request_failed",
                endpoint=endpoint,
                error_code=error.code,
                error=str(e),
            )
            raise error from e


def _check_page(page: int) -> None:
    if page < 1:
        raise InvalidURLError(message=f"Page must be >= 1, got {page}")
