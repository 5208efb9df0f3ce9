"""
Generic filter, sort and paginate over any registered module.

The composer never switches on field names: criteria are compiled from the
catalog's semantic types and values are read through the accessors the
module registered once at import time.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gridengine.cache.entity_cache import EntityCache
from gridengine.cache.store import MemoryCache
from gridengine.catalog.registry import EntityRegistration
from gridengine.catalog.schemas import FieldDefinition
from gridengine.catalog.service import FieldCatalogService
from gridengine.core.base_dao import BaseDAO
from gridengine.core.config import Settings
from gridengine.core.exceptions import NotFoundError, StorageError, ValidationError
from gridengine.query.operators import compile_criterion
from gridengine.query.schemas import (
    FilterCriterion,
    GridQueryRequest,
    GridQueryResponse,
    QueryPage,
    SortKey,
)

logger = logging.getLogger(__name__)


class SavedFilterResolver(Protocol):
    def resolve(self, filter_id: int, module: str) -> List[FilterCriterion]:
        ...


def _sort_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _sort_key(getter: Callable[[Any], Any]) -> Callable[[Any], tuple]:
    # None orders before any value; reversing for descending puts it last
    def key(entity: Any) -> tuple:
        value = getter(entity)
        if value is None:
            return (0,)
        return (1, _sort_value(value))

    return key


def _require_fields(
    module: str,
    fields: Dict[str, FieldDefinition],
    names: Iterable[str],
    usage: str,
) -> None:
    for name in names:
        if name not in fields:
            raise ValidationError(
                f"Unknown {usage} field {name} for module {module}",
                module=module,
                field=name,
            )


class QueryComposer:
    def __init__(
        self,
        catalog: FieldCatalogService,
        saved_filters: Optional[SavedFilterResolver] = None,
    ):
        self.catalog = catalog
        self.saved_filters = saved_filters

    def execute(
        self,
        module: str,
        entities: Iterable[Any],
        criteria: Optional[Sequence[FilterCriterion]] = None,
        sort: Optional[Sequence[SortKey]] = None,
        skip: int = 0,
        take: int = 50,
        saved_filter_id: Optional[int] = None,
        today: Optional[date] = None,
        named_filter: Optional[str] = None,
    ) -> QueryPage:
        """Filter, count, sort and page ``entities`` of ``module``.

        ``entities`` must be in storage order; it is the final tie-breaker.
        Criteria apply in order: named filter, saved filter, then ``criteria``.
        """
        registration = self.catalog.require_registration(module)
        fields = self.catalog.field_map(module)
        criteria = list(criteria or [])
        _require_fields(module, fields, [c.field_name for c in criteria], "filter")
        if skip < 0:
            raise ValidationError("skip cannot be negative", skip=skip)
        today = today or date.today()

        if saved_filter_id is not None:
            criteria = self._saved_criteria(module, saved_filter_id) + criteria
        if named_filter:
            criteria = self._named_criteria(registration, named_filter, today) + criteria
        _require_fields(module, fields, [c.field_name for c in criteria], "filter")

        predicates = self._compile(registration, fields, criteria, today)

        try:
            matched = [e for e in entities if all(p(e) for p in predicates)]
        except SQLAlchemyError as e:
            logger.error(f"Loading {module} entities failed: {e}")
            raise StorageError(
                f"Storage failure while querying {module}", original=e, operation="execute", module=module
            ) from e
        total_count = len(matched)

        sort_keys = list(sort or []) or [
            SortKey(field_name=name, descending=desc) for name, desc in registration.default_sort
        ]
        _require_fields(module, fields, [k.field_name for k in sort_keys], "sort")
        # Successive stable sorts, least significant key first
        for sort_key in reversed(sort_keys):
            getter = registration.accessors[sort_key.field_name]
            matched.sort(key=_sort_key(getter), reverse=sort_key.descending)

        if take <= 0:
            return QueryPage(items=[], total_count=total_count)
        return QueryPage(items=matched[skip : skip + take], total_count=total_count)

    def _saved_criteria(self, module: str, saved_filter_id: int) -> List[FilterCriterion]:
        if self.saved_filters is None:
            raise ValidationError("Saved filters are not available", saved_filter_id=saved_filter_id)
        return list(self.saved_filters.resolve(saved_filter_id, module))

    def _named_criteria(self, registration: EntityRegistration, name: str, today: date) -> List[FilterCriterion]:
        named = registration.named_filter(name)
        if named is None:
            raise NotFoundError(
                f"Unknown named filter '{name}' for module {registration.module}",
                module=registration.module,
                named_filter=name,
            )
        return named.resolve(today)

    def _compile(
        self,
        registration: EntityRegistration,
        fields: Dict[str, FieldDefinition],
        criteria: Sequence[FilterCriterion],
        today: Optional[date],
    ) -> List[Callable[[Any], bool]]:
        predicates = []
        for criterion in criteria:
            predicate = compile_criterion(
                fields[criterion.field_name], criterion.operator, criterion.value, today=today
            )
            if predicate is None:
                continue
            getter = registration.accessors[criterion.field_name]
            predicates.append(lambda e, p=predicate, g=getter: p(g(e)))
        return predicates


class SqlAlchemyEntitySource:
    """Loads a module's rows as plain dict snapshots, primary key ascending."""

    def __init__(self, db: Session, registration: EntityRegistration):
        self.registration = registration
        self.dao = BaseDAO(registration.model, db)

    def snapshot(self, row: Any) -> Dict[str, Any]:
        return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}

    def load(self) -> List[Dict[str, Any]]:
        return [self.snapshot(row) for row in self.dao.get_all()]

    def get(self, entity_id: Any) -> Optional[Dict[str, Any]]:
        row = self.dao.get_by_id(entity_id)
        return self.snapshot(row) if row is not None else None


class GridQueryService:
    """Runs grid queries against the database through the entity cache."""

    def __init__(
        self,
        db: Session,
        catalog: FieldCatalogService,
        saved_filters: Optional[SavedFilterResolver] = None,
        cache: Optional[MemoryCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.composer = QueryComposer(catalog, saved_filters)
        self.cache = cache
        self.settings = settings

    def query(self, module: str, request: GridQueryRequest, today: Optional[date] = None) -> GridQueryResponse:
        registration = self.catalog.require_registration(module)
        columns = request.fields or [f.field_name for f in self.catalog.get_fields(module)]
        _require_fields(module, self.catalog.field_map(module), columns, "display")

        source = SqlAlchemyEntitySource(self.db, registration)
        entity_cache = EntityCache(module, cache=self.cache, settings=self.settings)
        entities = entity_cache.get_all(source.load)

        page = self.composer.execute(
            module,
            entities,
            criteria=request.criteria,
            sort=request.sort,
            skip=request.skip,
            take=request.take,
            saved_filter_id=request.saved_filter_id,
            named_filter=request.named_filter,
            today=today,
        )
        logger.debug(f"Grid query on {module} matched {page.total_count} rows")
        return GridQueryResponse(
            module=module,
            items=[registration.project(entity, columns) for entity in page.items],
            total_count=page.total_count,
            skip=request.skip,
            take=request.take,
        )
