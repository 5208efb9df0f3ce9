"""Module-level and user-level caches for field catalogs and view configurations.

Module catalogs are loaded for a fixed list of modules at startup. A module
requested later that is not cached is reloaded synchronously and the miss is
logged, because a runtime miss usually means the warm-up failed or the entry
expired.

User preference maps (``page_name -> view_id``) are loaded at login, dropped
at logout and on every preference write.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gridengine.cache.keys import CatalogKind, ModuleCatalogKey, UserPreferencesKey, ViewConfigKey
from gridengine.cache.store import MemoryCache, get_cache
from gridengine.catalog.dao import DisplayFieldDAO
from gridengine.catalog.registry import get_registration
from gridengine.catalog.schemas import FieldDefinition, NamedFilterOption
from gridengine.core.config import Settings, get_settings
from gridengine.core.exceptions import GridEngineError, NotFoundError
from gridengine.views.dao import UserPagePreferenceDAO, ViewDAO
from gridengine.views.schemas import ViewConfiguration, ViewFieldSelection, ViewSummary

logger = logging.getLogger(__name__)

UserId = Union[int, str]


class ViewCacheService:
    """Read-through access to catalogs, views and user preferences."""

    def __init__(
        self,
        db: Session,
        cache: Optional[MemoryCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.cache = cache if cache is not None else get_cache()
        self.settings = settings or get_settings()
        self.field_dao = DisplayFieldDAO(db)
        self.view_dao = ViewDAO(db)
        self.preference_dao = UserPagePreferenceDAO(db)

    # ===== MODULE CATALOGS =====

    def warm_up(self, modules: Optional[Iterable[str]] = None) -> Dict[str, bool]:
        """Load field and view catalogs for each module. Failures are logged, never raised."""
        results: Dict[str, bool] = {}
        for module in modules or self.settings.warm_up_modules:
            try:
                self._store_fields(module, self._load_fields(module))
                self._store_views(module, self._load_views(module))
                results[module] = True
            except (GridEngineError, SQLAlchemyError) as e:
                logger.error(f"Cache warm-up failed for module {module}: {e}")
                results[module] = False
        loaded = sum(1 for ok in results.values() if ok)
        logger.info(f"Cache warm-up loaded {loaded}/{len(results)} modules")
        return results

    def get_fields_for_module(self, module: str) -> List[FieldDefinition]:
        key = ModuleCatalogKey(CatalogKind.FIELDS, module)
        fields = self.cache.get(key)
        if fields is None:
            logger.warning(f"Field catalog for module {module} not cached; reloading")
            fields = self._load_fields(module)
            self._store_fields(module, fields)
        return fields

    def get_views_for_module(self, module: str) -> List[ViewSummary]:
        key = ModuleCatalogKey(CatalogKind.VIEWS, module)
        views = self.cache.get(key)
        if views is None:
            logger.warning(f"View catalog for module {module} not cached; reloading")
            views = self._load_views(module)
            self._store_views(module, views)
        return views

    def invalidate_module_views(self, module: str) -> None:
        self.cache.remove(ModuleCatalogKey(CatalogKind.VIEWS, module))

    def get_named_filters(self, module: str) -> List[NamedFilterOption]:
        """Preset filters offered by ``module``, cached like the other catalogs."""
        registration = get_registration(module)
        if registration is None:
            raise NotFoundError(f"Unknown module: {module}", module=module)
        return self.cache.get_or_create(
            ModuleCatalogKey(CatalogKind.NAMED_FILTERS, module),
            lambda: [
                NamedFilterOption(module=module, name=f.name, criteria_count=len(f.criteria))
                for f in registration.named_filters.values()
            ],
            ttl=self.settings.named_filter_ttl,
        )

    def _load_fields(self, module: str) -> List[FieldDefinition]:
        rows = self.field_dao.get_fields_for_module(module)
        if not rows:
            raise NotFoundError(f"Unknown module: {module}", module=module)
        return [FieldDefinition.model_validate(row) for row in rows]

    def _store_fields(self, module: str, fields: List[FieldDefinition]) -> None:
        self.cache.set(
            ModuleCatalogKey(CatalogKind.FIELDS, module),
            fields,
            ttl=self.settings.catalog_ttl,
        )

    def _load_views(self, module: str) -> List[ViewSummary]:
        return [
            ViewSummary(view_id=view.id, module=view.module, view_name=view.view_name)
            for view in self.view_dao.get_by_module(module)
        ]

    def _store_views(self, module: str, views: List[ViewSummary]) -> None:
        self.cache.set(
            ModuleCatalogKey(CatalogKind.VIEWS, module),
            views,
            ttl=self.settings.catalog_ttl,
        )

    # ===== USER PREFERENCES =====

    def load_user_preferences(self, user_id: UserId) -> Dict[str, int]:
        """Load the user's ``page_name -> view_id`` map into the cache."""
        user_id = str(user_id)
        preferences = {
            pref.page_name: pref.view_id for pref in self.preference_dao.get_for_user(user_id)
        }
        self.cache.set(
            UserPreferencesKey(user_id),
            preferences,
            ttl=self.settings.user_preferences_ttl,
        )
        logger.debug(f"Loaded {len(preferences)} page preferences for user {user_id}")
        return preferences

    def get_user_preferences(self, user_id: UserId) -> Dict[str, int]:
        preferences = self.cache.get(UserPreferencesKey(str(user_id)))
        if preferences is None:
            preferences = self.load_user_preferences(user_id)
        return preferences

    def get_preferred_view_id(self, user_id: UserId, page_name: str) -> Optional[int]:
        return self.get_user_preferences(user_id).get(page_name)

    def invalidate_user(self, user_id: UserId) -> None:
        self.cache.remove(UserPreferencesKey(str(user_id)))

    # ===== VIEW CONFIGURATIONS =====

    def get_view_config(self, view_id: int) -> Optional[ViewConfiguration]:
        """Stored configuration of a view, or ``None`` if it no longer exists."""
        key = ViewConfigKey(view_id)
        config = self.cache.get(key)
        if config is not None:
            return config
        view = self.view_dao.get_with_fields(view_id)
        if view is None:
            return None
        config = ViewConfiguration(
            view_id=view.id,
            module=view.module,
            view_name=view.view_name,
            fields=[
                ViewFieldSelection(field_name=f.field_name, is_selected=True, display_order=f.display_order)
                for f in view.fields
            ],
        )
        self.cache.set(key, config, ttl=self.settings.view_config_ttl)
        return config

    def invalidate_view(self, view_id: int) -> None:
        self.cache.remove(ViewConfigKey(view_id))
