"""
Central logging setup for the API server and the scheduler worker.

``setup_logging`` installs one console handler and, when ``ENABLE_FILE_LOGGING``
is on, a DEBUG file handler writing ``<LOG_FILE_DIR>/agent_sns.log``. Both
handlers share one of three formats:

- ``simple``: level, logger and message
- ``detailed``: adds time, source location and function
- ``json``: one JSON object per record, suitable for log shippers

Handlers installed here are tagged so that calling ``setup_logging`` again
replaces them without touching handlers added by other tools (uvicorn,
pytest's capture).
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from agent_sns.server.core.config import LoggingConfig

LOG_FILE_NAME = "agent_sns.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SIMPLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
DETAILED_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d %(funcName)s] %(message)s"

# Loggers that do not follow the console level
MODULE_LOG_LEVELS: Dict[str, str] = {
    "agent_sns.server.api": "DEBUG",
    "agent_sns.server.services": "DEBUG",
    "agent_sns.worker": "INFO",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "aiosqlite": "WARNING",
    "asyncio": "WARNING",
    "httpx": "WARNING",
    "uvicorn.access": "INFO",
}

_OWNED = "_agent_sns_handler"


class JsonFormatter(logging.Formatter):
    """Render each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "module": record.filename,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def build_formatter(name: str) -> logging.Formatter:
    """Formatter for ``simple``, ``detailed`` or ``json``; unknown names fall back to ``detailed``."""
    if name == "json":
        return JsonFormatter()
    if name == "simple":
        return logging.Formatter(SIMPLE_FORMAT)
    return logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT)


def owned_handlers(logger: Optional[logging.Logger] = None) -> List[logging.Handler]:
    """Handlers installed by ``setup_logging`` on ``logger`` (the root logger by default)."""
    logger = logger or logging.getLogger()
    return [handler for handler in logger.handlers if getattr(handler, _OWNED, False)]


def _load_config() -> "LoggingConfig":
    # Imported late: the settings module must stay importable without logging set up
    from agent_sns.server.core.config import settings

    return settings.logging


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
    config: Optional["LoggingConfig"] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Console level; defaults to ``AGENT_SNS_LOG_LEVEL``
        log_format: ``simple``, ``detailed`` or ``json``; defaults to ``LOG_FORMAT``
        enable_file: Allow the file handler. It is only added when
            ``ENABLE_FILE_LOGGING`` is also on.
        config: Logging settings; defaults to ``settings.logging``
    """
    config = config or _load_config()
    level = (log_level or config.level).upper()
    fmt = log_format or config.format
    formatter = build_formatter(fmt)

    root = logging.getLogger()
    # Handlers filter by level; the root passes everything through
    root.setLevel(logging.DEBUG)
    for handler in owned_handlers(root):
        root.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = []
    console = logging.StreamHandler()
    console.setLevel(level)
    handlers.append(console)

    to_file = enable_file and config.file_enabled
    if to_file:
        log_dir = Path(config.file_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _OWNED, True)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(module_level)

    root.info(f"Logging configured: level={level}, format={fmt}, file={to_file}")


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (pass ``__name__``)."""
    return logging.getLogger(name)
