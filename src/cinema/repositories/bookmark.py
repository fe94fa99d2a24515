"""BookmarkRepository for managing bookmarked movies.

The insert is a single conditional statement so that two concurrent saves
of the same movie cannot both create a row.
"""

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite

from cinema.models.bookmark import BookmarkedMovie
from cinema.repositories.base import BaseRepository
from cinema.schemas.movie import Movie

_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class BookmarkRepository(BaseRepository[BookmarkedMovie]):
    """Repository for BookmarkedMovie entities."""

    async def insert_if_absent(self, movie: Movie, saved_date: datetime) -> bool:
        """Insert a bookmark unless one already exists for ``movie.id``.

        Args:
            movie: Movie snapshot to store
            saved_date: Bookmark time (UTC)

        Returns:
            True if a row was inserted, False if the movie was already bookmarked
        """
        dialect = self.session.bind.dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Conditional insert not supported on {dialect}")

        stmt = (
            insert(BookmarkedMovie)
            .values(
                movie_id=movie.id,
                title=movie.title,
                overview=movie.overview,
                poster_path=movie.poster_path,
                backdrop_path=movie.backdrop_path,
                release_date=movie.release_date,
                vote_average=movie.vote_average,
                vote_count=movie.vote_count,
                popularity=movie.popularity,
                is_bookmarked=True,
                saved_date=saved_date,
            )
            .on_conflict_do_nothing(index_elements=[BookmarkedMovie.movie_id])
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def delete_by_movie_id(self, movie_id: int) -> int:
        """Delete every bookmark row for a movie.

        Returns:
            Number of rows deleted
        """
        result = await self.session.execute(
            delete(BookmarkedMovie).where(BookmarkedMovie.movie_id == movie_id)
        )
        return result.rowcount or 0

    async def is_bookmarked(self, movie_id: int) -> bool:
        """Check whether a flagged bookmark exists for a movie."""
        result = await self.session.execute(
            select(func.count())
            .select_from(BookmarkedMovie)
            .where(BookmarkedMovie.movie_id == movie_id)
            .where(BookmarkedMovie.is_bookmarked.is_(True))
        )
        return result.scalar_one() > 0

    async def list_bookmarked(self) -> list[BookmarkedMovie]:
        """Get flagged bookmarks, most recently saved first."""
        result = await self.session.execute(
            select(BookmarkedMovie)
            .where(BookmarkedMovie.is_bookmarked.is_(True))
            .order_by(BookmarkedMovie.saved_date.desc())
        )
        return list(result.scalars().all())
