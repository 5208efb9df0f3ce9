# gridengine/core/dependencies.py
"""FastAPI dependencies wiring sessions, caches and services."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from gridengine.cache.store import MemoryCache, get_cache
from gridengine.core.config import Settings, get_settings
from gridengine.core.database import get_db

SessionDep = Annotated[Session, Depends(get_db)]
CacheDep = Annotated[MemoryCache, Depends(get_cache)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_view_cache(db: SessionDep, cache: CacheDep, settings: SettingsDep):
    from gridengine.cache.view_cache import ViewCacheService

    return ViewCacheService(db, cache=cache, settings=settings)


def get_catalog_service(view_cache=Depends(get_view_cache)):
    from gridengine.catalog.service import FieldCatalogService

    return FieldCatalogService(view_cache)


def get_saved_filter_service(
    db: SessionDep, cache: CacheDep, settings: SettingsDep, catalog=Depends(get_catalog_service)
):
    from gridengine.filters.service import SavedFilterService

    return SavedFilterService(db, catalog, cache=cache, settings=settings)


def get_view_service(db: SessionDep, view_cache=Depends(get_view_cache), catalog=Depends(get_catalog_service)):
    from gridengine.views.service import ViewConfigurationService

    return ViewConfigurationService(db, catalog, view_cache)


def get_grid_query_service(
    db: SessionDep,
    cache: CacheDep,
    settings: SettingsDep,
    catalog=Depends(get_catalog_service),
    saved_filters=Depends(get_saved_filter_service),
):
    from gridengine.query.composer import GridQueryService

    return GridQueryService(db, catalog, saved_filters, cache=cache, settings=settings)


def get_entity_service(db: SessionDep, cache: CacheDep, settings: SettingsDep, catalog=Depends(get_catalog_service)):
    from gridengine.entities.service import EntityService

    return EntityService(db, catalog, cache=cache, settings=settings)
