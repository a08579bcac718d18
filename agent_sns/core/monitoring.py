"""
Optional Logfire tracing.

``initialize_logfire`` configures Logfire once per process when
``LOGFIRE_ENABLED`` is set and a ``LOGFIRE_TOKEN`` is present, then
instruments the application's SQLAlchemy engine and FastAPI app. Until that
has happened the ``log_*`` helpers only write to the standard logger, so
tests and local runs never talk to Logfire.
"""

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from agent_sns.server.core.config import MonitoringConfig, settings

logger = logging.getLogger(__name__)

_state: Dict[str, bool] = {"active": False}


def is_active() -> bool:
    """Whether Logfire has been configured in this process."""
    return _state["active"]


def reset() -> None:
    _state["active"] = False


def service_version() -> str:
    try:
        return version("agent-sns")
    except PackageNotFoundError:
        return "0.0.0"


def _instrument(target: str, call: Callable[[], Any]) -> None:
    try:
        call()
        logger.info(f"Logfire: {target} instrumentation enabled")
    except Exception as e:
        logger.warning(f"Logfire: {target} instrumentation failed: {e}")


def initialize_logfire(
    app: Optional[FastAPI] = None,
    engine: Optional[AsyncEngine] = None,
    config: Optional[MonitoringConfig] = None,
) -> bool:
    """
    Configure Logfire and instrument the given app and engine.

    Args:
        app: FastAPI application to trace
        engine: Async engine whose queries are traced
        config: Monitoring settings; defaults to ``settings.monitoring``

    Returns:
        True when Logfire is now active
    """
    config = config or settings.monitoring
    if not config.enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False
    if not config.token:
        logger.warning("LOGFIRE_ENABLED is set but LOGFIRE_TOKEN is empty; monitoring stays off.")
        return False

    import logfire

    logfire.configure(
        token=config.token,
        service_name=config.service_name,
        service_version=service_version(),
        environment=config.environment,
    )
    if config.trace_sqlalchemy and engine is not None:
        _instrument("SQLAlchemy", lambda: logfire.instrument_sqlalchemy(engine=engine.sync_engine))
    if config.trace_fastapi and app is not None:
        _instrument("FastAPI", lambda: logfire.instrument_fastapi(app))

    _state["active"] = True
    logger.info(f"Logfire monitoring initialized: service={config.service_name}, environment={config.environment}")
    return True


def _emit(level: str, template: str, **attributes: Any) -> None:
    import logfire

    try:
        getattr(logfire, level)(template, **attributes)
    except Exception as e:
        logger.debug(f"Could not send '{template}' to Logfire: {e}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """Record one finished request."""
    if not is_active():
        logger.debug(f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)")
        return
    _emit(
        "info",
        "{method} {path} -> {status_code}",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def log_auth_failure(kind: str, reason: str, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Record a rejected credential.

    Args:
        kind: Which credential was checked (session, agent_key, agent_write, wallet)
        reason: The error message returned to the client
        context: Extra attributes such as the request path
    """
    logger.info(f"Authentication rejected ({kind}): {reason}", extra=context or {})
    if is_active():
        _emit("warn", "Authentication rejected ({kind})", kind=kind, reason=reason, **(context or {}))
