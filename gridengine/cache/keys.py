# gridengine/cache/keys.py
"""Structured cache keys.

Every cached value is addressed by one of these frozen dataclasses. Keys are
compared by value, so two threads building the same key hit the same entry.
"""

import hashlib
import json
from dataclasses import dataclass
from decimal import Decimal
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional, Union


class CatalogKind(str, Enum):
    """Kinds of module-wide catalogs."""

    FIELDS = "fields"
    VIEWS = "views"
    NAMED_FILTERS = "named_filters"


@dataclass(frozen=True)
class ModuleCatalogKey:
    kind: CatalogKind
    module: str


@dataclass(frozen=True)
class UserPreferencesKey:
    user_id: str


@dataclass(frozen=True)
class ViewConfigKey:
    view_id: int


@dataclass(frozen=True)
class SavedFilterListKey:
    module: str


@dataclass(frozen=True)
class EntityKey:
    entity_type: str
    entity_id: Any


@dataclass(frozen=True)
class AggregateKey:
    """Key for a "get all matching" result set of one entity type."""

    entity_type: str
    fingerprint: str


CacheKey = Union[
    ModuleCatalogKey,
    UserPreferencesKey,
    ViewConfigKey,
    SavedFilterListKey,
    EntityKey,
    AggregateKey,
]

# Fingerprint used for the unfiltered "all" aggregate of an entity type.
ALL_FINGERPRINT = "all"


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return str(value)


def fingerprint(criteria: Optional[Iterable[Any]] = None, **extra: Any) -> str:
    """Deterministic identifier for a filter/query shape.

    Criteria order is preserved: the same criteria in a different order
    produce a different fingerprint, which only costs an extra cache entry.
    """
    criteria = list(criteria or [])
    if not criteria and not extra:
        return ALL_FINGERPRINT
    payload = json.dumps(
        {"criteria": criteria, "extra": extra},
        sort_keys=True,
        default=_json_default,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
