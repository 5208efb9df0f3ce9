"""Entity-level cache: single entities by id and aggregate result sets.

The store supports point removal only, so every aggregate key written for an
entity type is recorded in :class:`AggregateKeyRegistry`. A write to any entity
of that type removes its id key and every registered aggregate key.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from gridengine.cache.keys import AggregateKey, EntityKey, fingerprint
from gridengine.cache.store import MemoryCache, get_cache
from gridengine.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_MISSING = object()


class AggregateKeyRegistry:
    """Tracks the aggregate keys that currently may hold data, per entity type."""

    def __init__(self):
        self._keys: Dict[str, Set[AggregateKey]] = {}
        self._lock = threading.Lock()

    def register(self, key: AggregateKey) -> None:
        with self._lock:
            self._keys.setdefault(key.entity_type, set()).add(key)

    def pop_all(self, entity_type: str) -> Set[AggregateKey]:
        with self._lock:
            return self._keys.pop(entity_type, set())

    def keys_for(self, entity_type: str) -> Set[AggregateKey]:
        with self._lock:
            return set(self._keys.get(entity_type, ()))


_default_registry = AggregateKeyRegistry()


def get_aggregate_registry() -> AggregateKeyRegistry:
    return _default_registry


class EntityCache:
    """Cache-aside access for one entity type.

    Loaders are supplied by the caller so the cache stays independent of the
    persistence layer. ``None`` results are not cached.
    """

    def __init__(
        self,
        entity_type: str,
        cache: Optional[MemoryCache] = None,
        registry: Optional[AggregateKeyRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.entity_type = entity_type
        self.cache = cache if cache is not None else get_cache()
        self.registry = registry if registry is not None else get_aggregate_registry()
        self.settings = settings or get_settings()

    def get_by_id(self, entity_id: Any, loader: Callable[[], Optional[Any]]) -> Optional[Any]:
        key = EntityKey(self.entity_type, entity_id)
        value = self.cache.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = loader()
        if value is not None:
            self.cache.set(key, value, ttl=self.settings.entity_ttl)
        return value

    def get_all(
        self,
        loader: Callable[[], List[Any]],
        criteria: Optional[Iterable[Any]] = None,
        **extra: Any,
    ) -> List[Any]:
        """Result set for ``criteria`` (all entities when omitted)."""
        key = AggregateKey(self.entity_type, fingerprint(criteria, **extra))
        # registered before populating so a concurrent write cannot miss it
        self.registry.register(key)
        value = self.cache.get_or_create(
            key,
            loader,
            ttl=self.settings.aggregate_ttl,
            sliding=self.settings.aggregate_sliding,
        )
        # and again afterwards, in case an invalidation popped it meanwhile
        self.registry.register(key)
        return value

    def invalidate(self, entity_id: Any = None) -> int:
        """Remove ``entity_id`` and every aggregate of this type. Call only after commit."""
        removed = 0
        if entity_id is not None and self.cache.remove(EntityKey(self.entity_type, entity_id)):
            removed += 1
        for key in self.registry.pop_all(self.entity_type):
            if self.cache.remove(key):
                removed += 1
        logger.debug(f"Invalidated {removed} cache entries for {self.entity_type} (id={entity_id})")
        return removed
