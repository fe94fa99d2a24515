"""Movie and page schemas.

These models are both the wire format of the catalog API (snake_case keys)
and the payload stored in the response cache. Instances are frozen: a page
is created per request and never mutated.

Derived values (image URLs, share link, formatted strings) are never
serialised. The URL helpers take the settings to build from and fall back
to the cached application settings.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cinema.config import Settings, get_settings


class Movie(BaseModel):
    """A single movie as returned by the catalog API.

    Attributes:
        id: Stable catalog identity
        title: Display title
        overview: Synopsis
        poster_path: Poster image path, relative to the image base URL
        backdrop_path: Backdrop image path, relative to the image base URL
        release_date: Release date as ``YYYY-MM-DD`` (may be empty)
        vote_average: Average rating, 0.0-10.0
        vote_count: Number of votes
        popularity: Upstream popularity score
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    title: str
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str = ""
    vote_average: float = Field(default=0.0, ge=0.0, le=10.0)
    vote_count: int = Field(default=0, ge=0)
    popularity: float = 0.0

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    def image_url(
        self, path: str | None, size: str, settings: Settings | None = None
    ) -> str | None:
        if not path:
            return None
        settings = settings or get_settings()
        return f"{settings.image_base_url}/{size}{path}"

    def poster_url(self, settings: Settings | None = None) -> str | None:
        settings = settings or get_settings()
        return self.image_url(self.poster_path, settings.poster_size, settings)

    def backdrop_url(self, settings: Settings | None = None) -> str | None:
        settings = settings or get_settings()
        return self.image_url(self.backdrop_path, settings.backdrop_size, settings)

    def thumbnail_url(self, settings: Settings | None = None) -> str | None:
        settings = settings or get_settings()
        return self.image_url(self.poster_path, settings.thumbnail_size, settings)

    def share_url(self, settings: Settings | None = None) -> str:
        """Deep link that opens this movie, e.g. ``cinema://movie/550``."""
        settings = settings or get_settings()
        return f"{settings.deep_link_scheme}://movie/{self.id}"

    @property
    def formatted_rating(self) -> str:
        return f"{self.vote_average:.1f}"

    @property
    def formatted_release_date(self) -> str:
        """Medium-style date ("Jan 1, 2024"), or the raw value if unparseable."""
        try:
            released = datetime.strptime(self.release_date, "%Y-%m-%d")
        except ValueError:
            return self.release_date
        return f"{released:%b} {released.day}, {released.year}"


class PageResponse(BaseModel):
    """One page of movies in server order.

    Attributes:
        page: Page number (1-indexed)
        results: Movies on this page, order is meaningful
        total_pages: Total pages reported upstream
        total_results: Total results reported upstream
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    page: int = Field(..., ge=1)
    results: list[Movie] = Field(default_factory=list)
    total_pages: int = Field(default=0, ge=0)
    total_results: int = Field(default=0, ge=0)


# =============================================================================
# API Response Schemas
# =============================================================================


class MovieListResponse(BaseModel):
    """A page of movies returned by the list endpoints."""

    page: int = Field(..., ge=1, description="Page number that was fetched")
    results: list[Movie] = Field(default_factory=list, description="Movies")
    has_more: bool = Field(..., description="Whether another page likely exists")


class BookmarkStatusResponse(BaseModel):
    """Bookmark state of a single movie."""

    movie_id: int
    is_bookmarked: bool


class DeepLinkResolution(BaseModel):
    """Result of resolving a deep link URI."""

    url: str
    movie_id: int | None = Field(
        None, description="Movie to open, null when the link is not recognised"
    )
