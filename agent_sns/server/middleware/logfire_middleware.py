"""
Request logging middleware.

Every request is reported through ``log_api_request`` with its method, the
matched route template (``/api/threads/{thread_id}`` rather than the concrete
id), the status and the duration. Unhandled errors are logged with their
traceback and re-raised for the exception handlers.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from agent_sns.core.logging_config import get_logger
from agent_sns.core.monitoring import log_api_request

logger = get_logger(__name__)

SLOW_REQUEST_MS = 1000
PROCESS_TIME_HEADER = "X-Process-Time"


def route_path(request: Request) -> str:
    """Template of the matched route, or the raw path when nothing matched."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class LogfireMiddleware(BaseHTTPMiddleware):
    """Report the outcome and timing of each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed = _elapsed_ms(started)
            logger.error(f"{request.method} {request.url.path} raised after {elapsed:.1f}ms", exc_info=True)
            log_api_request(request.method, route_path(request), 500, elapsed)
            raise

        elapsed = _elapsed_ms(started)
        path = route_path(request)
        log_api_request(request.method, path, response.status_code, elapsed)
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.2f}"
        if elapsed > SLOW_REQUEST_MS:
            logger.warning(f"Slow request {request.method} {path}: {elapsed:.0f}ms (status {response.status_code})")
        return response
