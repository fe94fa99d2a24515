"""API v1 main router.

Aggregates all v1 API routers into a single router for inclusion in the app.
"""

from fastapi import APIRouter

from cinema.api.v1.bookmarks import router as bookmarks_router
from cinema.api.v1.deeplinks import router as deeplinks_router
from cinema.api.v1.movies import router as movies_router

router = APIRouter()

# Include sub-routers
router.include_router(movies_router, prefix="/movies", tags=["Movies"])
router.include_router(bookmarks_router, prefix="/bookmarks", tags=["Bookmarks"])
router.include_router(deeplinks_router, prefix="/deeplinks", tags=["Deep Links"])
