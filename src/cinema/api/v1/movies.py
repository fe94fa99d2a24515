"""Movie list, search and detail endpoints.

Each list endpoint returns one page together with ``has_more``, computed
with the same page-size rule the list controllers use.
"""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from cinema.core.logging import get_logger
from cinema.dependencies import CatalogDep, SettingsDep
from cinema.schemas.common import ErrorResponse
from cinema.schemas.movie import Movie, MovieListResponse

logger = get_logger(__name__)

router = APIRouter()

PageQuery = Annotated[int, Query(ge=1, description="Page number")]

CATALOG_ERRORS = {
    500: {"model": ErrorResponse, "description": "Invalid request URL"},
    502: {"model": ErrorResponse, "description": "Catalog server error"},
    503: {"model": ErrorResponse, "description": "Catalog unreachable"},
    504: {"model": ErrorResponse, "description": "Catalog timed out"},
}


def _page(page: int, movies: list[Movie], page_size: int) -> MovieListResponse:
    return MovieListResponse(page=page, results=movies, has_more=len(movies) == page_size)


@router.get(
    "/trending",
    response_model=MovieListResponse,
    status_code=status.HTTP_200_OK,
    summary="Trending movies",
    description="This week's trending movies. Pages are cached for 24 hours.",
    responses=CATALOG_ERRORS,
)
async def trending_movies(
    catalog: CatalogDep, settings: SettingsDep, page: PageQuery = 1
) -> MovieListResponse:
    movies = await catalog.get_trending_movies(page=page)
    return _page(page, movies, settings.page_size)


@router.get(
    "/now-playing",
    response_model=MovieListResponse,
    status_code=status.HTTP_200_OK,
    summary="Now playing movies",
    description="Movies currently in theatres. Pages are cached for 24 hours.",
    responses=CATALOG_ERRORS,
)
async def now_playing_movies(
    catalog: CatalogDep, settings: SettingsDep, page: PageQuery = 1
) -> MovieListResponse:
    movies = await catalog.get_now_playing_movies(page=page)
    return _page(page, movies, settings.page_size)


@router.get(
    "/search",
    response_model=MovieListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search movies",
    description="Search movies by title. Results are never cached.",
    responses=CATALOG_ERRORS,
)
async def search_movies(
    catalog: CatalogDep,
    settings: SettingsDep,
    query: Annotated[str, Query(min_length=1, description="Search text")],
    page: PageQuery = 1,
) -> MovieListResponse:
    """Search by title. A blank query returns an empty page without a request."""
    if not query.strip():
        return MovieListResponse(page=page, results=[], has_more=False)

    logger.info("search_movies_request", query=query, page=page)
    movies = await catalog.search_movies(query, page=page)
    return _page(page, movies, settings.page_size)


@router.get(
    "/{movie_id}",
    response_model=Movie,
    status_code=status.HTTP_200_OK,
    summary="Movie details",
    responses={
        404: {"model": ErrorResponse, "description": "Movie not found"},
        **CATALOG_ERRORS,
    },
)
async def movie_details(
    catalog: CatalogDep,
    movie_id: Annotated[int, Path(ge=1, description="Catalog movie ID")],
) -> Movie:
    return await catalog.get_movie_details(movie_id)
