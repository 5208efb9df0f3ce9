# gridengine/core/router.py
"""
Module for registering routes in the FastAPI application.
"""

from fastapi import FastAPI

from gridengine.catalog.router import router as catalog_router
from gridengine.entities.router import router as entity_router
from gridengine.filters.router import router as filter_router
from gridengine.query.router import router as grid_router
from gridengine.views.router import router as view_router
from gridengine.views.session_router import router as session_router


def register_routes(app: FastAPI) -> None:
    """
    Registers all the routes for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    app.include_router(catalog_router, prefix="/api")
    app.include_router(grid_router, prefix="/api")
    app.include_router(filter_router, prefix="/api")
    app.include_router(view_router, prefix="/api")
    app.include_router(session_router, prefix="/api")
    app.include_router(entity_router, prefix="/api")
