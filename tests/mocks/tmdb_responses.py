"""Mock responses for TMDB API calls.

These mocks allow testing without making real catalog API calls.
"""

from typing import Any

# =============================================================================
# Single Movies
# =============================================================================

# Movie: 550 - Fight Club
FIGHT_CLUB: dict[str, Any] = {
    "adult": False,
    "backdrop_path": "/hZkgoQYus5vegHoetLkCJzb17zJ.jpg",
    "genre_ids": [18],
    "id": 550,
    "original_language": "en",
    "original_title": "Fight Club",
    "overview": "A ticking-time-bomb insomniac and a slippery soap salesman "
    "channel primal male aggression into a shocking new form of therapy.",
    "popularity": 61.416,
    "poster_path": "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
    "release_date": "1999-10-15",
    "title": "Fight Club",
    "video": False,
    "vote_average": 8.433,
    "vote_count": 26280,
}

# Movie: 27205 - Inception
INCEPTION: dict[str, Any] = {
    "backdrop_path": "/8ZTVqvKDQ8emSGUEMjsS4yHAwrp.jpg",
    "id": 27205,
    "overview": "Cobb, a skilled thief who commits corporate espionage by "
    "infiltrating the subconscious of his targets is offered a chance to "
    "regain his old life.",
    "popularity": 83.952,
    "poster_path": "/oYuLEt3zVCKq57qu2F8dT7NIa6f.jpg",
    "release_date": "2010-07-15",
    "title": "Inception",
    "vote_average": 8.4,
    "vote_count": 35000,
}

# A movie without artwork or release date
OBSCURE_MOVIE: dict[str, Any] = {
    "id": 999001,
    "title": "Untitled Short",
    "overview": "",
    "poster_path": None,
    "backdrop_path": None,
    "release_date": "",
    "vote_average": 0,
    "vote_count": 0,
    "popularity": 0.6,
}


# =============================================================================
# Error Responses
# =============================================================================

NOT_FOUND_RESPONSE = {
    "success": False,
    "status_code": 34,
    "status_message": "The resource you requested could not be found.",
}

INVALID_API_KEY_RESPONSE = {
    "success": False,
    "status_code": 7,
    "status_message": "Invalid API key: You must be granted a valid key.",
}


# =============================================================================
# Helper Functions
# =============================================================================


def make_movie(movie_id: int, title: str | None = None) -> dict[str, Any]:
    """Build a minimal raw movie payload."""
    return {
        "id": movie_id,
        "title": title or f"Movie {movie_id}",
        "overview": f"Overview of movie {movie_id}",
        "poster_path": f"/poster{movie_id}.jpg",
        "backdrop_path": f"/backdrop{movie_id}.jpg",
        "release_date": "2024-01-01",
        "vote_average": 7.5,
        "vote_count": 100,
        "popularity": 10.0,
    }


def make_page(
    page: int = 1,
    count: int = 20,
    start_id: int | None = None,
    total_pages: int = 5,
) -> dict[str, Any]:
    """Build a raw page payload holding ``count`` movies.

    Movie ids are ``start_id .. start_id + count - 1`` (default derived from
    the page number so pages never overlap).
    """
    first = start_id if start_id is not None else (page - 1) * 100 + 1
    return {
        "page": page,
        "results": [make_movie(first + i) for i in range(count)],
        "total_pages": total_pages,
        "total_results": total_pages * 20,
    }
