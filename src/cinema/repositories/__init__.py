"""Repository pattern package for Cinema.

This module exports the base repository class and concrete repositories.
"""

from cinema.repositories.base import BaseRepository
from cinema.repositories.bookmark import BookmarkRepository
from cinema.repositories.cached_response import CachedResponseRepository

__all__ = [
    "BaseRepository",
    "BookmarkRepository",
    "CachedResponseRepository",
]
