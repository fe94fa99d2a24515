"""Deep link resolution endpoint."""

from typing import Annotated

from fastapi import APIRouter, Query

from cinema.dependencies import DeepLinkDep
from cinema.schemas.movie import DeepLinkResolution

router = APIRouter()


@router.get(
    "/resolve",
    response_model=DeepLinkResolution,
    summary="Resolve a deep link",
    description="Returns the movie a `cinema://movie/{id}` link opens, or null.",
)
async def resolve_deep_link(
    handler: DeepLinkDep,
    url: Annotated[str, Query(min_length=1, description="Deep link URI")],
) -> DeepLinkResolution:
    """Resolve without touching the handler's selection, which is app-wide."""
    return DeepLinkResolution(url=url, movie_id=handler.parse(url))
