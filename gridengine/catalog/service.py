"""Field catalog lookups, always served through the module catalog cache."""

from typing import List

from gridengine.cache.view_cache import ViewCacheService
from gridengine.catalog.registry import ENTITY_REGISTRY, get_registration
from gridengine.catalog.schemas import FieldDefinition, ModuleSummary, NamedFilterOption
from gridengine.core.exceptions import NotFoundError


class FieldCatalogService:
    def __init__(self, view_cache: ViewCacheService):
        self.view_cache = view_cache

    def get_fields(self, module: str) -> List[FieldDefinition]:
        """Fields of ``module`` in display order. Unknown module raises ``NotFoundError``."""
        return self.view_cache.get_fields_for_module(module)

    def get_field(self, module: str, field_name: str) -> FieldDefinition:
        for field in self.get_fields(module):
            if field.field_name == field_name:
                return field
        raise NotFoundError(
            f"Unknown field {field_name} for module {module}",
            module=module,
            field=field_name,
        )

    def field_map(self, module: str) -> dict:
        return {field.field_name: field for field in self.get_fields(module)}

    def list_modules(self) -> List[ModuleSummary]:
        summaries = []
        for module, registration in ENTITY_REGISTRY.items():
            summaries.append(
                ModuleSummary(
                    module=module,
                    field_count=len(self.get_fields(module)),
                    pages=list(registration.pages),
                )
            )
        return summaries

    def list_named_filters(self, module: str) -> List[NamedFilterOption]:
        return self.view_cache.get_named_filters(module)

    def require_registration(self, module: str):
        registration = get_registration(module)
        if registration is None:
            raise NotFoundError(f"Unknown module: {module}", module=module)
        return registration
