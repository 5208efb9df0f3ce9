from typing import List

from fastapi import APIRouter, Depends

from gridengine.core.dependencies import get_view_service
from gridengine.views.schemas import (
    UserPageViewRequest,
    ViewConfiguration,
    ViewConfigurationCreate,
    ViewConfigurationUpdate,
    ViewSummary,
)
from gridengine.views.service import ViewConfigurationService

router = APIRouter(prefix="/views", tags=["Views"])


@router.get("/users/{user_id}/pages/{page_name}", response_model=ViewConfiguration)
async def get_user_page_view(
    user_id: str, page_name: str, service: ViewConfigurationService = Depends(get_view_service)
):
    """Resolve the view a user sees on a page"""
    return service.get_for_user_page(user_id, page_name)


@router.put("/users/{user_id}/pages/{page_name}", response_model=ViewConfiguration)
async def set_user_page_view(
    user_id: str,
    page_name: str,
    payload: UserPageViewRequest,
    service: ViewConfigurationService = Depends(get_view_service),
):
    """Point a user's page at a view, creating one when no view id is given"""
    return service.set_for_user_page(user_id, page_name, payload)


@router.post("", response_model=ViewConfiguration, status_code=201)
async def create_view(payload: ViewConfigurationCreate, service: ViewConfigurationService = Depends(get_view_service)):
    return service.create(payload)


@router.put("/{view_id}", response_model=ViewConfiguration)
async def update_view(
    view_id: int, payload: ViewConfigurationUpdate, service: ViewConfigurationService = Depends(get_view_service)
):
    return service.update(view_id, payload)


@router.delete("/{view_id}", status_code=204)
async def delete_view(view_id: int, service: ViewConfigurationService = Depends(get_view_service)):
    """Delete a view and the preferences that point at it"""
    service.delete(view_id)
    return None


@router.get("/{module}/default", response_model=ViewConfiguration)
async def get_default_view(module: str, service: ViewConfigurationService = Depends(get_view_service)):
    return service.get_default(module)


@router.get("/{module}", response_model=List[ViewSummary])
async def list_views(module: str, service: ViewConfigurationService = Depends(get_view_service)):
    """List the stored views of a module"""
    return service.list_views(module)
