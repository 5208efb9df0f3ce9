"""Saved filter store.

Criteria are validated against the field catalog when a filter is saved.
The per-module filter list is cached with a sliding window and dropped after
every committed write.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gridengine.cache.keys import SavedFilterListKey
from gridengine.cache.store import MemoryCache, get_cache
from gridengine.catalog.schemas import FieldDefinition, OperatorOption
from gridengine.catalog.service import FieldCatalogService
from gridengine.core.config import Settings, get_settings
from gridengine.core.exceptions import ConflictError, NotFoundError, ValidationError
from gridengine.filters.dao import SavedFilterDAO
from gridengine.filters.models import SavedFilter
from gridengine.filters.schemas import SavedFilterRead, clean_filter_name
from gridengine.query.operators import operator_options, resolve_operator
from gridengine.query.schemas import FilterCriterion

logger = logging.getLogger(__name__)


class SavedFilterService:
    def __init__(
        self,
        db: Session,
        catalog: FieldCatalogService,
        cache: Optional[MemoryCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.dao = SavedFilterDAO(db)
        self.catalog = catalog
        self.cache = cache if cache is not None else get_cache()
        self.settings = settings or get_settings()

    # ===== READS =====

    def get(self, filter_id: int) -> SavedFilterRead:
        saved = self.dao.get_with_criteria(filter_id)
        if saved is None:
            raise NotFoundError(f"Saved filter {filter_id} not found", filter_id=filter_id)
        return SavedFilterRead.model_validate(saved)

    def list(self, module: str) -> List[SavedFilterRead]:
        self.catalog.get_fields(module)
        return self.cache.get_or_create(
            SavedFilterListKey(module),
            lambda: [SavedFilterRead.model_validate(f) for f in self.dao.get_by_module(module)],
            sliding=self.settings.saved_filter_list_sliding,
        )

    def resolve(self, filter_id: int, module: str) -> List[FilterCriterion]:
        """Criteria of a saved filter, checked to belong to ``module``."""
        saved = self.get(filter_id)
        if saved.module != module:
            raise ValidationError(
                f"Saved filter {filter_id} belongs to module {saved.module}, not {module}",
                filter_id=filter_id,
                module=module,
            )
        return list(saved.criteria)

    def available_fields(self, module: str) -> List[FieldDefinition]:
        return self.catalog.get_fields(module)

    def comparison_types(self, module: str, field_name: str) -> List[OperatorOption]:
        return operator_options(self.catalog.get_field(module, field_name).field_type)

    # ===== WRITES =====

    def create(self, module: str, name: str, criteria: Sequence[FilterCriterion]) -> int:
        """Save a new filter and return its id."""
        name = self._clean_name(name)
        self._validate_criteria(module, criteria)
        if self.dao.name_exists(module, name):
            raise ConflictError(f"A filter named '{name}' already exists for {module}", module=module, name=name)

        saved = SavedFilter(module=module, name=name, criteria=self.dao.build_criteria(criteria))
        self.dao.db.add(saved)
        self._commit("create", module=module, name=name)
        self._post_write(module)
        logger.info(f"Created saved filter {saved.id} '{name}' for {module}")
        return saved.id

    def update(self, filter_id: int, name: str, criteria: Sequence[FilterCriterion]) -> SavedFilterRead:
        """Rename a filter and replace its whole criteria list."""
        saved = self.dao.get_with_criteria(filter_id)
        if saved is None:
            raise NotFoundError(f"Saved filter {filter_id} not found", filter_id=filter_id)
        name = self._clean_name(name)
        self._validate_criteria(saved.module, criteria)
        if self.dao.name_exists(saved.module, name, exclude_id=filter_id):
            raise ConflictError(
                f"A filter named '{name}' already exists for {saved.module}",
                module=saved.module,
                name=name,
            )

        saved.name = name
        saved.criteria = self.dao.build_criteria(criteria)
        self._commit("update", filter_id=filter_id, module=saved.module)
        self._post_write(saved.module)
        return self.get(filter_id)

    def delete(self, filter_id: int) -> None:
        saved = self.dao.get_by_id(filter_id)
        if saved is None:
            raise NotFoundError(f"Saved filter {filter_id} not found", filter_id=filter_id)
        module = saved.module
        self.dao.db.delete(saved)
        self._commit("delete", filter_id=filter_id, module=module)
        self._post_write(module)
        logger.info(f"Deleted saved filter {filter_id} from {module}")

    @staticmethod
    def _clean_name(name: str) -> str:
        try:
            return clean_filter_name(name or "")
        except ValueError as e:
            raise ValidationError(str(e), name=name) from e

    def _validate_criteria(self, module: str, criteria: Sequence[FilterCriterion]) -> None:
        fields = self.catalog.field_map(module)
        for criterion in criteria:
            field = fields.get(criterion.field_name)
            if field is None:
                raise ValidationError(
                    f"Unknown filter field {criterion.field_name} for module {module}",
                    module=module,
                    field=criterion.field_name,
                )
            resolve_operator(field, criterion.operator)

    def _commit(self, operation: str, **context) -> None:
        try:
            self.dao.commit(operation, **context)
        except IntegrityError as e:
            raise ConflictError("A saved filter with this name already exists", **context) from e

    def _post_write(self, module: str) -> None:
        self.cache.remove(SavedFilterListKey(module))
