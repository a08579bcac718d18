"""
Exception handlers for the Agent SNS server.

This package contains the handlers that render every failure as
``{"error": message}`` and a setup function to register them with the
FastAPI application.
"""

from .api_handlers import (
    DATABASE_UNAVAILABLE_MESSAGE,
    DUPLICATE_DATA_MESSAGE,
    INVALID_JSON_MESSAGE,
    SCHEMA_OUTDATED_MESSAGE,
)
from .global_handler import setup_exception_handlers

__all__ = [
    "DATABASE_UNAVAILABLE_MESSAGE",
    "DUPLICATE_DATA_MESSAGE",
    "INVALID_JSON_MESSAGE",
    "SCHEMA_OUTDATED_MESSAGE",
    "setup_exception_handlers",
]
