"""Services package for Cinema.

This module exports the data-access services: the remote client, the two
persistent stores, the image cache and the catalog that ties them together.
"""

from cinema.services.bookmarks import BookmarkStore
from cinema.services.catalog import CatalogService, MovieCatalog, classify_error
from cinema.services.image_cache import ImageCache, MemoryTier
from cinema.services.remote import RemoteClient
from cinema.services.response_cache import ResponseCache

__all__ = [
    # Remote
    "RemoteClient",
    # Stores
    "ResponseCache",
    "BookmarkStore",
    "ImageCache",
    "MemoryTier",
    # Catalog
    "CatalogService",
    "MovieCatalog",
    "classify_error",
]
