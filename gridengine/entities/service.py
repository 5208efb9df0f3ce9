"""Cached CRUD over the registered entity types.

Payloads and results are keyed by catalog field names (``BuyerName``), not by
column attributes. Every write commits first and only then clears the id key
and every aggregate of the entity type.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gridengine.cache.entity_cache import EntityCache
from gridengine.cache.store import MemoryCache
from gridengine.catalog.registry import EntityRegistration
from gridengine.catalog.service import FieldCatalogService
from gridengine.core.config import Settings
from gridengine.core.exceptions import NotFoundError, ValidationError
from gridengine.query.composer import SqlAlchemyEntitySource

logger = logging.getLogger(__name__)


def _coerce(python_type: type, value: Any) -> Any:
    if value is None or isinstance(value, python_type):
        return value
    if python_type is bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)
    if python_type is datetime:
        return datetime.fromisoformat(str(value))
    if python_type is date:
        return date.fromisoformat(str(value)[:10])
    if python_type is Decimal:
        return Decimal(str(value))
    return python_type(value)


class EntityService:
    def __init__(
        self,
        db: Session,
        catalog: FieldCatalogService,
        cache: Optional[MemoryCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.cache = cache
        self.settings = settings

    def _context(self, module: str):
        registration = self.catalog.require_registration(module)
        source = SqlAlchemyEntitySource(self.db, registration)
        entity_cache = EntityCache(module, cache=self.cache, settings=self.settings)
        return registration, source, entity_cache

    # ===== READS =====

    def list(self, module: str) -> List[Dict[str, Any]]:
        registration, source, entity_cache = self._context(module)
        return [registration.project(e) for e in entity_cache.get_all(source.load)]

    def get(self, module: str, entity_id: int) -> Dict[str, Any]:
        registration, source, entity_cache = self._context(module)
        entity = entity_cache.get_by_id(entity_id, lambda: source.get(entity_id))
        if entity is None:
            raise NotFoundError(f"{module} {entity_id} not found", module=module, entity_id=entity_id)
        return registration.project(entity)

    # ===== WRITES =====

    def create(self, module: str, data: Dict[str, Any]) -> Dict[str, Any]:
        registration, source, entity_cache = self._context(module)
        values = self._to_attributes(registration, data)
        try:
            row = source.dao.create(**values)
        except IntegrityError as e:
            raise ValidationError(f"{module} violates a required or unique column", module=module) from e
        entity_id = getattr(row, registration.id_attribute)
        entity_cache.invalidate(entity_id)
        logger.info(f"Created {module} {entity_id}")
        return registration.project(row)

    def update(self, module: str, entity_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        registration, source, entity_cache = self._context(module)
        row = source.dao.get_by_id(entity_id)
        if row is None:
            raise NotFoundError(f"{module} {entity_id} not found", module=module, entity_id=entity_id)
        values = self._to_attributes(registration, data)
        try:
            row = source.dao.update(row, **values)
        except IntegrityError as e:
            raise ValidationError(
                f"{module} {entity_id} violates a required or unique column", module=module
            ) from e
        entity_cache.invalidate(entity_id)
        logger.info(f"Updated {module} {entity_id}")
        return registration.project(row)

    def delete(self, module: str, entity_id: int) -> None:
        registration, source, entity_cache = self._context(module)
        if not source.dao.delete(entity_id):
            raise NotFoundError(f"{module} {entity_id} not found", module=module, entity_id=entity_id)
        entity_cache.invalidate(entity_id)
        logger.info(f"Deleted {module} {entity_id}")

    def _to_attributes(self, registration: EntityRegistration, data: Dict[str, Any]) -> Dict[str, Any]:
        """Map field names to column attributes, parsing values for the column type."""
        columns = registration.model.__table__.columns
        values = {}
        for field_name, value in data.items():
            if field_name == registration.id_field:
                raise ValidationError(f"{field_name} is read-only", field=field_name)
            attribute = registration.attributes.get(field_name)
            if attribute is None:
                raise ValidationError(
                    f"Unknown field {field_name} for module {registration.module}",
                    module=registration.module,
                    field=field_name,
                )
            try:
                values[attribute] = _coerce(columns[attribute].type.python_type, value)
            except (TypeError, ValueError, InvalidOperation) as e:
                raise ValidationError(
                    f"Invalid value for {field_name}: {value!r}", field=field_name
                ) from e
        return values

