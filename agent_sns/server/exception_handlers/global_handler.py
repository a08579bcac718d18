"""
Fallback handler for exceptions no other handler claims.

The client only sees a generic message and an error id; the id, request
context and traceback go to the log so a report can be matched to it.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agent_sns.core.database.base import new_id
from agent_sns.core.logging_config import get_logger

from .api_handlers import EXCEPTION_HANDLERS

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = new_id()[:12]
    logger.exception(
        f"Unhandled {type(exc).__name__} [{error_id}] in {request.method} {request.url.path}: {exc}",
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown",
        },
    )
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE, "errorId": error_id})


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the expected-failure handlers, then the catch-all."""
    for exc_class, handler in EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, handler)
    app.add_exception_handler(Exception, global_exception_handler)
