"""BookmarkedMovie model - a user's saved movie snapshot.

Snapshot columns mirror the Movie schema so bookmarks can be listed without
a network round trip.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinema.models.base import Base, UTCDateTime, UUIDPrimaryKeyMixin


class BookmarkedMovie(UUIDPrimaryKeyMixin, Base):
    """A bookmarked movie, one row per movie id.

    Attributes:
        movie_id: Catalog movie id (uniqueness key)
        title, overview, poster_path, backdrop_path, release_date,
        vote_average, vote_count, popularity: Movie snapshot at save time
        is_bookmarked: Only flagged rows are listed
        saved_date: When the bookmark was created (UTC)
    """

    __tablename__ = "bookmarked_movies"

    movie_id: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    overview: Mapped[str] = mapped_column(Text, nullable=False, default="")
    poster_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    backdrop_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    release_date: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    vote_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    popularity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_bookmarked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True
    )
    saved_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<BookmarkedMovie(movie_id={self.movie_id}, title='{self.title}', "
            f"saved_date={self.saved_date})>"
        )
