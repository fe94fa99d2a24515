"""Custom exception hierarchy for Cinema.

This module defines the error taxonomy surfaced by the catalog service and
the HTTP layer:
- Structured error payloads with machine-readable codes
- Consistent HTTP status code mapping
- A closed set of catalog failures callers can branch on

Usage:
    from cinema.core.exceptions import CatalogError, ServerError

    try:
        movies = await catalog.get_trending_movies(page=2)
    except CatalogError as e:
        show(e.message)
"""

from typing import Any


class CinemaError(Exception):
    """Base exception for all Cinema errors.

    Attributes:
        code: Machine-readable error code (e.g., "timeout")
        message: Human-readable error message
        status_code: HTTP status code to return
        details: Additional error details (optional)
    """

    code: str = "internal_error"
    message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Override default message
            code: Override default error code
            details: Additional error details
        """
        if message:
            self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Convert exception to API error response format.

        Args:
            request_id: Request correlation ID

        Returns:
            Error response dictionary
        """
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if request_id:
            error["request_id"] = request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


# =============================================================================
# Catalog Errors (502, 503, 504)
# =============================================================================


class CatalogError(CinemaError):
    """Base class for failures of the movie catalog service.

    Raised by the catalog service after classifying the raw transport error;
    the original exception is chained as ``__cause__``.
    """

    code: str = "catalog_error"
    message: str = "Movie catalog request failed"
    status_code: int = 502


class InvalidURLError(CatalogError):
    """The request URL could not be constructed. Not retried."""

    code: str = "invalid_url"
    message: str = "Invalid URL"
    status_code: int = 500


class RequestTimeoutError(CatalogError):
    """The request timed out. Transient, callers may retry."""

    code: str = "timeout"
    message: str = "Request timed out. Please try again."
    status_code: int = 504


class NoInternetError(CatalogError):
    """The catalog host could not be reached."""

    code: str = "no_internet"
    message: str = "No internet connection. Please check your network settings."
    status_code: int = 503


class ServerError(CatalogError):
    """Catch-all transport or decoding failure carrying a readable detail."""

    code: str = "server_error"
    message: str = "Server error"

    def __init__(self, detail: str) -> None:
        """Initialize with the underlying failure description.

        Args:
            detail: Human-readable description of what went wrong
        """
        self.detail = detail
        super().__init__(message=f"Server error: {detail}", details={"detail": detail})


class InvalidResponseError(CatalogError):
    """The payload arrived intact but does not describe movies."""

    code: str = "invalid_response"
    message: str = "Invalid response from server"


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class MovieNotFoundError(CinemaError):
    """Raised when a movie lookup finds nothing."""

    code: str = "movie_not_found"
    message: str = "Movie not found"
    status_code: int = 404

    def __init__(self, movie_id: int | None = None, message: str | None = None) -> None:
        """Initialize with optional movie ID."""
        details: dict[str, Any] = {}
        if movie_id is not None:
            details["movie_id"] = movie_id
            if not message:
                message = f"Movie with ID {movie_id} not found"

        super().__init__(message=message, details=details if details else None)


# =============================================================================
# Storage Errors
# =============================================================================


class StoreNotReadyError(CinemaError):
    """Raised when the persistent store has not finished initialising.

    Stores catch this and fall back to their empty/default results.
    """

    code: str = "store_not_ready"
    message: str = "Persistent store is not ready"
    status_code: int = 503
