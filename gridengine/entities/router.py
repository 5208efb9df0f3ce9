from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from gridengine.core.dependencies import get_entity_service
from gridengine.entities.service import EntityService

router = APIRouter(prefix="/entities", tags=["Entities"])


@router.get("/{module}", response_model=List[Dict[str, Any]])
async def list_entities(module: str, service: EntityService = Depends(get_entity_service)):
    return service.list(module)


@router.post("/{module}", response_model=Dict[str, Any], status_code=201)
async def create_entity(
    module: str,
    data: Dict[str, Any] = Body(...),
    service: EntityService = Depends(get_entity_service),
):
    """Create an entity from a ``field_name -> value`` payload"""
    return service.create(module, data)


@router.get("/{module}/{entity_id}", response_model=Dict[str, Any])
async def get_entity(module: str, entity_id: int, service: EntityService = Depends(get_entity_service)):
    return service.get(module, entity_id)


@router.put("/{module}/{entity_id}", response_model=Dict[str, Any])
async def update_entity(
    module: str,
    entity_id: int,
    data: Dict[str, Any] = Body(...),
    service: EntityService = Depends(get_entity_service),
):
    return service.update(module, entity_id, data)


@router.delete("/{module}/{entity_id}", status_code=204)
async def delete_entity(module: str, entity_id: int, service: EntityService = Depends(get_entity_service)):
    service.delete(module, entity_id)
    return None
