"""
Handlers for expected API failures.

Route errors, framework errors, request validation errors and database
errors are all rendered in the same ``{"error": message}`` shape.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, ProgrammingError
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent_sns.core.logging_config import get_logger
from agent_sns.server.errors import ApiError

logger = get_logger(__name__)

INVALID_JSON_MESSAGE = "Invalid JSON body."
DUPLICATE_DATA_MESSAGE = "Duplicate data conflict."
DATABASE_UNAVAILABLE_MESSAGE = "Database is unavailable. Check DATABASE_URL and database connectivity."
SCHEMA_OUTDATED_MESSAGE = "Database schema is outdated. Run alembic upgrade head on the SNS database."

# Driver messages for a missing table or column (SQLite, Postgres)
_MISSING_SCHEMA_MARKERS = ("no such table", "no such column", "does not exist", "undefinedtable", "undefinedcolumn")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map request validation failures to 400.

    A body that is not valid JSON gets a fixed message; anything else reports
    the first validation problem.
    """
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return error_response(400, INVALID_JSON_MESSAGE)
    if not errors:
        return error_response(400, "Invalid request.")
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header"))
    message = first.get("msg", "Invalid request.")
    return error_response(400, f"{location}: {message}" if location else message)


def _is_missing_schema(exc: Exception) -> bool:
    text = f"{type(getattr(exc, 'orig', None)).__name__} {exc}".lower()
    return any(marker in text for marker in _MISSING_SCHEMA_MARKERS)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Integrity violation in {request.method} {request.url.path}: {exc.orig}")
    return error_response(409, DUPLICATE_DATA_MESSAGE)


async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map operational database failures to 503."""
    if _is_missing_schema(exc):
        logger.error(f"Database schema mismatch in {request.method} {request.url.path}: {exc}")
        return error_response(503, SCHEMA_OUTDATED_MESSAGE)
    logger.error(f"Database unavailable in {request.method} {request.url.path}: {exc}")
    return error_response(503, DATABASE_UNAVAILABLE_MESSAGE)


EXCEPTION_HANDLERS = (
    (ApiError, api_error_handler),
    (StarletteHTTPException, http_exception_handler),
    (RequestValidationError, validation_exception_handler),
    (IntegrityError, integrity_error_handler),
    (OperationalError, database_error_handler),
    (ProgrammingError, database_error_handler),
    (InterfaceError, database_error_handler),
)
