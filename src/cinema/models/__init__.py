"""Models package for Cinema.

This module exports the Base class and all model classes so that
``Base.metadata`` knows every table before ``create_all`` runs.
"""

from cinema.models.base import Base, UTCDateTime, UUIDPrimaryKeyMixin
from cinema.models.bookmark import BookmarkedMovie
from cinema.models.cached_response import CachedResponse

__all__ = [
    # Base and helpers
    "Base",
    "UUIDPrimaryKeyMixin",
    "UTCDateTime",
    # Tables
    "CachedResponse",
    "BookmarkedMovie",
]
