"""
FastAPI Logging Middleware for MoodMusic

Logs every API request with timing, status and a request id, and binds the
request id and session id into structlog's context for the duration of the
request.
"""

import time
import uuid
from typing import Callable, List, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.logging_config import log_api_request, set_request_context

logger = structlog.get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API requests and responses.

    Adds an ``X-Request-ID`` header to every logged response.
    """

    def __init__(self, app, exclude_paths: Optional[List[str]] = None):
        """
        Initialize logging middleware.

        Args:
            app: FastAPI application
            exclude_paths: Paths that are not logged
        """
        super().__init__(app)
        self.logger = logger.bind(component="LoggingMiddleware")
        self.exclude_paths = exclude_paths or ["/health", "/docs", "/openapi.json"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_context(request_id=request_id, session_id=self._session_id(request))

        start_time = time.time()
        self.logger.info(
            "api_request_start",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=self._get_client_ip(request)
        )

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error(
                "api_request_error",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error_message=str(e),
                duration_seconds=round(time.time() - start_time, 4)
            )
            raise

        duration = time.time() - start_time
        self.logger.info(
            "api_request_complete",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_seconds=round(duration, 4)
        )
        log_api_request(
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            duration=duration,
            request_id=request_id
        )

        response.headers["X-Request-ID"] = request_id
        return response

    def _session_id(self, request: Request) -> Optional[str]:
        """Session id from /sessions/{id}/... paths."""
        parts = request.url.path.strip("/").split("/")
        if len(parts) >= 2 and parts[0] == "sessions":
            return parts[1]
        return None

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"
