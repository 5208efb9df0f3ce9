"""View configuration store.

Resolution for a user's page: preference -> stored view -> merge against the
full field catalog. When the user has no preference, or the view it points at
has gone, the module's default view is returned. The default view is never
stored: it is every catalog field, selected, in catalog order.
"""

import logging
import re
import uuid
from typing import Dict, List, Optional, Sequence, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gridengine.cache.view_cache import ViewCacheService
from gridengine.catalog.registry import module_for_page
from gridengine.catalog.schemas import FieldDefinition
from gridengine.catalog.service import FieldCatalogService
from gridengine.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from gridengine.views.dao import UserPagePreferenceDAO, ViewDAO
from gridengine.views.models import UserPagePreference, View, ViewField
from gridengine.views.schemas import (
    DEFAULT_VIEW_NAME,
    UNSELECTED_DISPLAY_ORDER,
    UserPageViewRequest,
    ViewConfiguration,
    ViewConfigurationCreate,
    ViewConfigurationUpdate,
    ViewFieldSelection,
    ViewSummary,
    clean_view_name,
)

logger = logging.getLogger(__name__)

# Suffix reserved for generated per-user view names
RESERVED_NAME_SUFFIX = re.compile(r"#\d+$")


def generated_view_name(user_id: Union[int, str], page_name: str, view_id: int) -> str:
    return f"User {user_id} - {page_name} #{view_id}"


class ViewConfigurationService:
    def __init__(self, db: Session, catalog: FieldCatalogService, view_cache: ViewCacheService):
        self.db = db
        self.catalog = catalog
        self.view_cache = view_cache
        self.view_dao = ViewDAO(db)
        self.preference_dao = UserPagePreferenceDAO(db)

    # ===== READS =====

    def get_default(self, module: str) -> ViewConfiguration:
        fields = self.catalog.get_fields(module)
        return ViewConfiguration(
            view_id=None,
            module=module,
            view_name=DEFAULT_VIEW_NAME,
            fields=[
                ViewFieldSelection(field_name=f.field_name, is_selected=True, display_order=index + 1)
                for index, f in enumerate(fields)
            ],
        )

    def list_views(self, module: str) -> List[ViewSummary]:
        self.catalog.get_fields(module)
        return self.view_cache.get_views_for_module(module)

    def get(self, view_id: int) -> ViewConfiguration:
        config = self.view_cache.get_view_config(view_id)
        if config is None:
            raise NotFoundError(f"View {view_id} not found", view_id=view_id)
        return self._merge(config, self.catalog.get_fields(config.module))

    def get_for_user_page(
        self, user_id: Union[int, str], page_name: str, module: Optional[str] = None
    ) -> ViewConfiguration:
        module = module or self._module_for_page(page_name)
        view_id = self.view_cache.get_preferred_view_id(user_id, page_name)
        if view_id is None:
            return self.get_default(module)

        config = self.view_cache.get_view_config(view_id)
        if config is None or config.module != module:
            logger.info(f"View {view_id} preferred by user {user_id} on {page_name} is gone; using default")
            return self.get_default(module)
        return self._merge(config, self.catalog.get_fields(module))

    # ===== WRITES =====

    def create(self, config: ViewConfigurationCreate) -> ViewConfiguration:
        catalog_fields = self.catalog.get_fields(config.module)
        view_name = self._validate_name(config.module, config.view_name)
        selected = self._selected_fields(config.module, catalog_fields, config.fields)

        view = View(module=config.module, view_name=view_name, fields=selected)
        self.db.add(view)
        self._commit("create", module=config.module, view_name=view_name)
        self._post_write(view.id, config.module)
        logger.info(f"Created view {view.id} '{view_name}' for {config.module}")
        return self.get(view.id)

    def update(self, view_id: int, config: ViewConfigurationUpdate) -> ViewConfiguration:
        view = self._require_view(view_id)
        if config.view_name is not None and config.view_name.strip() != view.view_name:
            view.view_name = self._validate_name(view.module, config.view_name, exclude_id=view_id)
        if config.fields is not None:
            catalog_fields = self.catalog.get_fields(view.module)
            view.fields = self._selected_fields(view.module, catalog_fields, config.fields)

        self._commit("update", view_id=view_id, module=view.module)
        self._post_write(view_id, view.module)
        return self.get(view_id)

    def delete(self, view_id: int) -> None:
        """Delete a view and every user preference that points at it."""
        view = self._require_view(view_id)
        module = view.module
        preferences = self.preference_dao.get_for_view(view_id)
        user_ids = {pref.user_id for pref in preferences}
        for pref in preferences:
            self.db.delete(pref)
        self.db.delete(view)
        self._commit("delete", view_id=view_id, module=module)

        self._post_write(view_id, module)
        for user_id in user_ids:
            self.view_cache.invalidate_user(user_id)
        logger.info(f"Deleted view {view_id} from {module} ({len(user_ids)} preferences removed)")

    def set_for_user_page(
        self, user_id: Union[int, str], page_name: str, request: UserPageViewRequest
    ) -> ViewConfiguration:
        """Point a user's page at a view, creating the view when no id is given."""
        module = self._module_for_page(page_name)
        catalog_fields = self.catalog.get_fields(module)
        user_id = str(user_id)

        if request.view_id is not None:
            view = self._require_view(request.view_id)
            if view.module != module:
                raise ValidationError(
                    f"View {view.id} belongs to module {view.module}, not {module}",
                    view_id=view.id,
                    page=page_name,
                )
            if request.view_name is not None and request.view_name.strip() != view.view_name:
                view.view_name = self._validate_name(module, request.view_name, exclude_id=view.id)
            if request.fields is not None:
                view.fields = self._selected_fields(module, catalog_fields, request.fields)
        else:
            fields = request.fields if request.fields is not None else self.get_default(module).fields
            view = View(module=module, fields=self._selected_fields(module, catalog_fields, fields))
            self.db.add(view)
            if request.view_name is not None:
                view.view_name = self._validate_name(module, request.view_name)
            else:
                # placeholder until the id is known; the reserved suffix makes the final name unique
                view.view_name = f"pending-{uuid.uuid4().hex}"
                self.view_dao.flush("set_for_user_page", user_id=user_id, page=page_name)
                view.view_name = generated_view_name(user_id, page_name, view.id)
        self._commit("set_for_user_page", user_id=user_id, page=page_name)
        view_id = view.id

        self._save_preference(user_id, page_name, view_id)
        self._post_write(view_id, module)
        self.view_cache.invalidate_user(user_id)
        return self.get_for_user_page(user_id, page_name, module)

    # ===== HELPERS =====

    def _module_for_page(self, page_name: str) -> str:
        module = module_for_page(page_name)
        if module is None:
            raise NotFoundError(f"Unknown page: {page_name}", page=page_name)
        return module

    def _require_view(self, view_id: int) -> View:
        view = self.view_dao.get_with_fields(view_id)
        if view is None:
            raise NotFoundError(f"View {view_id} not found", view_id=view_id)
        return view

    def _save_preference(self, user_id: str, page_name: str, view_id: int) -> None:
        """Upsert the (user, page) preference; the last write wins.

        A concurrent first write for the same pair can insert the row between
        our read and our commit. The unique constraint then fails and the row
        it inserted is overwritten instead.
        """
        for attempt in range(2):
            preference = self.preference_dao.get_for_user_page(user_id, page_name)
            if preference is None:
                self.db.add(UserPagePreference(user_id=user_id, page_name=page_name, view_id=view_id))
            else:
                preference.view_id = view_id
            try:
                self.preference_dao.commit("set_for_user_page", user_id=user_id, page=page_name)
                return
            except IntegrityError as e:
                if attempt:
                    raise StorageError(
                        f"Could not save the view preference of user {user_id} on {page_name}",
                        original=e,
                        operation="set_for_user_page",
                        user_id=user_id,
                        page=page_name,
                    ) from e
                logger.info(f"Preference of user {user_id} on {page_name} written concurrently; overwriting")

    def _validate_name(self, module: str, view_name: str, exclude_id: Optional[int] = None) -> str:
        """Cleaned ``view_name``, rejected when blank, reserved or taken within ``module``."""
        try:
            view_name = clean_view_name(view_name or "")
        except ValueError as e:
            raise ValidationError(str(e), view_name=view_name) from e
        if view_name == DEFAULT_VIEW_NAME:
            raise ValidationError(f"'{DEFAULT_VIEW_NAME}' is a reserved view name", view_name=view_name)
        if RESERVED_NAME_SUFFIX.search(view_name):
            raise ValidationError(
                "View names cannot end with '#' followed by digits", view_name=view_name
            )
        if self.view_dao.name_exists(module, view_name, exclude_id=exclude_id):
            raise ConflictError(
                f"A view named '{view_name}' already exists for {module}",
                module=module,
                view_name=view_name,
            )
        return view_name

    def _selected_fields(
        self,
        module: str,
        catalog_fields: Sequence[FieldDefinition],
        selections: Sequence[ViewFieldSelection],
    ) -> List[ViewField]:
        """Validate a selection and renumber the selected fields 1..n."""
        known = {f.field_name for f in catalog_fields}
        seen = set()
        for selection in selections:
            if selection.field_name not in known:
                raise ValidationError(
                    f"Unknown field {selection.field_name} for module {module}",
                    module=module,
                    field=selection.field_name,
                )
            if selection.field_name in seen:
                raise ValidationError(f"Field {selection.field_name} is listed twice", field=selection.field_name)
            seen.add(selection.field_name)

        ordered = sorted(
            (s for s in enumerate(selections) if s[1].is_selected),
            key=lambda pair: (pair[1].display_order, pair[0]),
        )
        if not ordered:
            raise ValidationError("A view must select at least one field", module=module)
        return [
            ViewField(field_name=selection.field_name, display_order=position)
            for position, (_, selection) in enumerate(ordered, start=1)
        ]

    def _merge(self, config: ViewConfiguration, catalog_fields: Sequence[FieldDefinition]) -> ViewConfiguration:
        """Selected stored fields first, then every other catalog field deselected."""
        known: Dict[str, FieldDefinition] = {f.field_name: f for f in catalog_fields}
        selected = [f for f in config.fields if f.is_selected and f.field_name in known]
        selected.sort(key=lambda f: f.display_order)
        chosen = {f.field_name for f in selected}
        merged = [
            ViewFieldSelection(field_name=f.field_name, is_selected=True, display_order=position)
            for position, f in enumerate(selected, start=1)
        ]
        merged.extend(
            ViewFieldSelection(
                field_name=f.field_name,
                is_selected=False,
                display_order=UNSELECTED_DISPLAY_ORDER,
            )
            for f in catalog_fields
            if f.field_name not in chosen
        )
        return config.model_copy(update={"fields": merged})

    def _commit(self, operation: str, **context) -> None:
        try:
            self.view_dao.commit(operation, **context)
        except IntegrityError as e:
            raise ConflictError("A view with this name already exists", **context) from e

    def _post_write(self, view_id: int, module: str) -> None:
        self.view_cache.invalidate_view(view_id)
        self.view_cache.invalidate_module_views(module)
