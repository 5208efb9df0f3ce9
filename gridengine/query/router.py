from fastapi import APIRouter, Depends

from gridengine.core.dependencies import get_grid_query_service
from gridengine.query.composer import GridQueryService
from gridengine.query.schemas import GridQueryRequest, GridQueryResponse

router = APIRouter(prefix="/grids", tags=["Grid Queries"])


@router.post("/{module}/query", response_model=GridQueryResponse)
async def query_grid(
    module: str,
    request: GridQueryRequest,
    service: GridQueryService = Depends(get_grid_query_service),
):
    """Filter, sort and page a module's grid"""
    return service.query(module, request)
