"""FastAPI application entry point for the grid engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware

from gridengine.cache.store import get_cache
from gridengine.cache.view_cache import ViewCacheService
from gridengine.core.config import get_settings
from gridengine.core.database import SessionLocal, init_db
from gridengine.core.exception_handlers import (
    general_exception_handler,
    grid_engine_exception_handler,
    request_validation_exception_handler,
    response_validation_exception_handler,
)
from gridengine.core.exceptions import GridEngineError
from gridengine.core.middleware import LoggingMiddleware
from gridengine.core.router import register_routes

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def warm_up_cache() -> None:
    """Load module catalogs. Failures are logged by the cache, never raised."""
    with SessionLocal() as session:
        ViewCacheService(session, cache=get_cache(), settings=get_settings()).warm_up()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.initialize_database:
        init_db()
    try:
        warm_up_cache()
    except Exception:
        logger.exception("Cache warm-up aborted")
    yield


def create_app(initialize_database: bool = True) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Grid Engine",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.initialize_database = initialize_database

    # Add request logger middleware
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(GridEngineError, grid_engine_exception_handler)
    app.add_exception_handler(ResponseValidationError, response_validation_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, replace with specific origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "cache": get_cache().stats.as_dict()}

    return app
