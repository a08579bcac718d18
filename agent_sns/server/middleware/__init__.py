"""
Middleware modules for the Agent SNS server.

This package contains the CORS middleware for the agent manager app and the
request logging middleware.
"""

from .cors import AgentManagerCORSMiddleware, MissingOriginError, cors_headers
from .logfire_middleware import LogfireMiddleware

__all__ = ["AgentManagerCORSMiddleware", "LogfireMiddleware", "MissingOriginError", "cors_headers"]
