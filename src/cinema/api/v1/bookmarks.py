"""Bookmark endpoints.

The bookmark store never fails loudly: when the persistent store is not
ready, listing returns an empty list and saves report ``is_bookmarked``
as false.
"""

from typing import Annotated

from fastapi import APIRouter, Path, status

from cinema.core.logging import get_logger
from cinema.dependencies import BookmarkStoreDep
from cinema.schemas.movie import BookmarkStatusResponse, Movie

logger = get_logger(__name__)

router = APIRouter()

MovieIdPath = Annotated[int, Path(ge=1, description="Catalog movie ID")]


@router.get(
    "",
    response_model=list[Movie],
    summary="List bookmarks",
    description="Bookmarked movies, most recently saved first.",
)
async def list_bookmarks(store: BookmarkStoreDep) -> list[Movie]:
    return await store.list()


@router.post(
    "",
    response_model=BookmarkStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Bookmark a movie",
    description="Saving a movie that is already bookmarked is a no-op.",
)
async def save_bookmark(movie: Movie, store: BookmarkStoreDep) -> BookmarkStatusResponse:
    await store.save(movie)
    return BookmarkStatusResponse(
        movie_id=movie.id, is_bookmarked=await store.is_bookmarked(movie.id)
    )


@router.get(
    "/{movie_id}",
    response_model=BookmarkStatusResponse,
    summary="Bookmark status",
)
async def bookmark_status(
    movie_id: MovieIdPath, store: BookmarkStoreDep
) -> BookmarkStatusResponse:
    return BookmarkStatusResponse(
        movie_id=movie_id, is_bookmarked=await store.is_bookmarked(movie_id)
    )


@router.delete(
    "/{movie_id}",
    response_model=BookmarkStatusResponse,
    summary="Remove a bookmark",
    description="Removing a movie that is not bookmarked is a no-op.",
)
async def remove_bookmark(
    movie_id: MovieIdPath, store: BookmarkStoreDep
) -> BookmarkStatusResponse:
    removed = await store.remove(movie_id)
    logger.info("remove_bookmark_request", movie_id=movie_id, removed=removed)
    return BookmarkStatusResponse(
        movie_id=movie_id, is_bookmarked=await store.is_bookmarked(movie_id)
    )
