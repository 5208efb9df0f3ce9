"""Login/logout hooks that load and drop a user's cached page preferences."""

from typing import Dict

from fastapi import APIRouter, Depends

from gridengine.cache.view_cache import ViewCacheService
from gridengine.core.dependencies import get_view_cache

router = APIRouter(prefix="/session", tags=["Session"])


@router.post("/{user_id}/login")
async def login(user_id: str, view_cache: ViewCacheService = Depends(get_view_cache)) -> Dict[str, object]:
    preferences = view_cache.load_user_preferences(user_id)
    return {"user_id": user_id, "pages": len(preferences)}


@router.post("/{user_id}/logout", status_code=204)
async def logout(user_id: str, view_cache: ViewCacheService = Depends(get_view_cache)):
    view_cache.invalidate_user(user_id)
    return None
