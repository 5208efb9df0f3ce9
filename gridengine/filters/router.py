from typing import List

from fastapi import APIRouter, Depends

from gridengine.catalog.schemas import FieldDefinition, OperatorOption
from gridengine.core.dependencies import get_saved_filter_service
from gridengine.filters.schemas import SavedFilterCreate, SavedFilterRead, SavedFilterUpdate
from gridengine.filters.service import SavedFilterService

router = APIRouter(prefix="/filters", tags=["Saved Filters"])


@router.get("", response_model=List[SavedFilterRead])
async def list_filters(module: str, service: SavedFilterService = Depends(get_saved_filter_service)):
    """List the saved filters of a module"""
    return service.list(module)


@router.post("", response_model=SavedFilterRead, status_code=201)
async def create_filter(payload: SavedFilterCreate, service: SavedFilterService = Depends(get_saved_filter_service)):
    """Create a saved filter"""
    filter_id = service.create(payload.module, payload.name, payload.criteria)
    return service.get(filter_id)


@router.get("/fields/{module}", response_model=List[FieldDefinition])
async def get_available_fields(module: str, service: SavedFilterService = Depends(get_saved_filter_service)):
    """Fields the filter builder can offer for a module"""
    return service.available_fields(module)


@router.get("/fields/{module}/{field_name}/operators", response_model=List[OperatorOption])
async def get_comparison_types(
    module: str, field_name: str, service: SavedFilterService = Depends(get_saved_filter_service)
):
    """Comparison operators accepted by one field"""
    return service.comparison_types(module, field_name)


@router.get("/{filter_id}", response_model=SavedFilterRead)
async def get_filter(filter_id: int, service: SavedFilterService = Depends(get_saved_filter_service)):
    return service.get(filter_id)


@router.put("/{filter_id}", response_model=SavedFilterRead)
async def update_filter(
    filter_id: int, payload: SavedFilterUpdate, service: SavedFilterService = Depends(get_saved_filter_service)
):
    """Rename a saved filter and replace its criteria"""
    return service.update(filter_id, payload.name, payload.criteria)


@router.delete("/{filter_id}", status_code=204)
async def delete_filter(filter_id: int, service: SavedFilterService = Depends(get_saved_filter_service)):
    service.delete(filter_id)
    return None
