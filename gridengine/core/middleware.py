# gridengine/core/middleware.py
"""Request logging middleware."""

import logging
import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger("gridengine.requests")


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, excluded_paths=("/api/docs", "/api/openapi.json", "/api/redoc")):
        super().__init__(app)
        self.excluded_paths = tuple(excluded_paths)

    async def dispatch(self, request: Request, call_next: Callable):
        # Skip logging for excluded paths
        if request.url.path.startswith(self.excluded_paths):
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        client_ip = request.client.host if request.client else None
        message = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({duration_ms:.1f} ms, client={client_ip})"
        )
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)
        return response
