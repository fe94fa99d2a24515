"""FastAPI dependency injection.

Routes reach the shared services through the ``AppContainer`` stored on the
application state during lifespan. Tests replace any of these with
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from cinema.config import Settings
from cinema.container import AppContainer
from cinema.deeplink import DeepLinkHandler
from cinema.services.bookmarks import BookmarkStore
from cinema.services.catalog import MovieCatalog


def get_container(request: Request) -> AppContainer:
    """Get the container created during lifespan."""
    return request.app.state.container


ContainerDep = Annotated[AppContainer, Depends(get_container)]


def get_settings_from_request(container: ContainerDep) -> Settings:
    return container.settings


def get_catalog(container: ContainerDep) -> MovieCatalog:
    return container.catalog


def get_bookmark_store(container: ContainerDep) -> BookmarkStore:
    return container.bookmarks


def get_deep_link_handler(container: ContainerDep) -> DeepLinkHandler:
    return container.deep_links


SettingsDep = Annotated[Settings, Depends(get_settings_from_request)]
CatalogDep = Annotated[MovieCatalog, Depends(get_catalog)]
BookmarkStoreDep = Annotated[BookmarkStore, Depends(get_bookmark_store)]
DeepLinkDep = Annotated[DeepLinkHandler, Depends(get_deep_link_handler)]
