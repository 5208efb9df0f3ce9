from typing import List

from fastapi import APIRouter, Depends

from gridengine.catalog.schemas import FieldDefinition, FieldType, ModuleSummary, NamedFilterOption, OperatorOption
from gridengine.catalog.service import FieldCatalogService
from gridengine.core.dependencies import get_catalog_service
from gridengine.query.operators import operator_options

router = APIRouter(prefix="/catalog", tags=["Field Catalog"])


@router.get("/modules", response_model=List[ModuleSummary])
async def list_modules(service: FieldCatalogService = Depends(get_catalog_service)):
    """List the grid modules and their pages"""
    return service.list_modules()


@router.get("/operators/{field_type}", response_model=List[OperatorOption])
async def get_operators(field_type: FieldType):
    """Comparison operators legal for a field type"""
    return operator_options(field_type)


@router.get("/{module}/fields", response_model=List[FieldDefinition])
async def get_fields(module: str, service: FieldCatalogService = Depends(get_catalog_service)):
    """Fields of a module in display order"""
    return service.get_fields(module)


@router.get("/{module}/named-filters", response_model=List[NamedFilterOption])
async def get_named_filters(module: str, service: FieldCatalogService = Depends(get_catalog_service)):
    """Preset filters the module offers by name"""
    return service.list_named_filters(module)
