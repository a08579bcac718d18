"""
CORS for the agent manager app.

Every ``/api`` response carries the same fixed set of headers for the single
configured origin, and ``OPTIONS`` requests are answered with 204 before they
reach a route. Unhandled errors are rendered here by the catch-all handler,
since a 500 produced further out by Starlette would leave the headers off and
the browser could not read its error id.
"""

from typing import Callable, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from agent_sns.core.logging_config import get_logger
from agent_sns.server.core.config import CORSConfig, settings
from agent_sns.server.exception_handlers.global_handler import global_exception_handler

logger = get_logger(__name__)


class MissingOriginError(RuntimeError):
    """AGENT_MANAGER_ORIGIN is not configured."""


def cors_headers(config: CORSConfig) -> Dict[str, str]:
    """Build the CORS headers for a configuration.

    Raises:
        MissingOriginError: If no origin is configured
    """
    origin = config.origin.strip()
    if not origin:
        raise MissingOriginError("AGENT_MANAGER_ORIGIN is required")
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Headers": ", ".join(config.allow_headers),
        "Access-Control-Allow-Methods": ",".join(config.allow_methods),
    }


class AgentManagerCORSMiddleware(BaseHTTPMiddleware):
    """Apply the agent manager CORS headers to API responses."""

    def __init__(self, app: ASGIApp, config: Optional[CORSConfig] = None, path_prefix: str = "/api") -> None:
        super().__init__(app)
        # Resolved when the middleware stack is built, so a missing origin fails at startup
        self.headers = cors_headers(config or settings.cors)
        self.path_prefix = path_prefix
        logger.info(f"CORS enabled for origin {self.headers['Access-Control-Allow-Origin']}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        if request.method == "OPTIONS":
            return Response(status_code=204, headers=self.headers)

        try:
            response = await call_next(request)
        except Exception as exc:
            response = await global_exception_handler(request, exc)
        response.headers.update(self.headers)
        return response
