# gridengine/core/exception_handlers.py
"""Translate engine errors and unexpected failures into JSON responses."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse

from gridengine.core.exceptions import GridEngineError, StorageError

logger = logging.getLogger(__name__)


def _convert_error(error):
    if isinstance(error, dict):
        return {k: _convert_error(v) for k, v in error.items()}
    if isinstance(error, (list, tuple)):
        return [_convert_error(item) for item in error]
    if isinstance(error, (int, float, bool)) or error is None:
        return error
    return str(error)


async def grid_engine_exception_handler(request: Request, exc: GridEngineError):
    """Engine errors carry their own status code"""
    if isinstance(exc, StorageError):
        logger.error(f"{request.method} {request.url.path} storage failure: {exc.message} {exc.context}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "type": "StorageError"})
    logger.info(f"{request.method} {request.url.path} rejected: {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    logger.info(f"{request.method} {request.url.path} invalid request: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": _convert_error(exc.errors())})


async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    logger.error(f"{request.method} {request.url.path} response validation failed: {exc.errors()}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error: Response validation failed."},
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
