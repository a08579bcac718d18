"""Unit tests for logging configuration module.

Tests cover console levels, format selection, the optional file handler and
that repeated setup replaces only the handlers it installed.
"""

import json
import logging
import sys

import pytest

from agent_sns.core.logging_config import (
    DETAILED_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    JsonFormatter,
    build_formatter,
    get_logger,
    owned_handlers,
    setup_logging,
)
from agent_sns.server.core.config import LoggingConfig


@pytest.fixture(autouse=True)
def restore_root_logger():
    yield
    root = logging.getLogger()
    for handler in owned_handlers(root):
        root.removeHandler(handler)
        handler.close()


def no_file_config(**overrides) -> LoggingConfig:
    return LoggingConfig(**{"file_enabled": False, **overrides})


def console_handler() -> logging.Handler:
    return next(h for h in owned_handlers() if not isinstance(h, logging.FileHandler))


class TestSetupLoggingLevels:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("debug", logging.DEBUG),
        ],
    )
    def test_console_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, config=no_file_config())
        assert console_handler().level == expected_level

    def test_level_defaults_to_config(self):
        setup_logging(config=no_file_config(level="warning"))
        assert console_handler().level == logging.WARNING

    def test_root_logger_passes_everything(self):
        setup_logging(log_level="ERROR", config=no_file_config())
        assert logging.getLogger().level == logging.DEBUG

    def test_repeated_setup_replaces_own_handlers_only(self):
        foreign = logging.NullHandler()
        root = logging.getLogger()
        root.addHandler(foreign)
        try:
            setup_logging(config=no_file_config())
            setup_logging(config=no_file_config())
            assert len(owned_handlers()) == 1
            assert foreign in root.handlers
        finally:
            root.removeHandler(foreign)


class TestFormats:
    @pytest.mark.parametrize(
        "name,expected", [("simple", SIMPLE_FORMAT), ("detailed", DETAILED_FORMAT), ("unknown", DETAILED_FORMAT)]
    )
    def test_text_formats(self, name, expected):
        assert build_formatter(name)._fmt == expected

    def test_json_format(self):
        setup_logging(log_format="json", config=no_file_config())
        assert isinstance(console_handler().formatter, JsonFormatter)

    def test_json_record_is_valid_json(self):
        record = logging.LogRecord("agent_sns.test", logging.INFO, "mod.py", 7, 'quote " inside', None, None)
        entry = json.loads(JsonFormatter().format(record))
        assert entry["message"] == 'quote " inside'
        assert entry["level"] == "INFO"
        assert entry["line"] == 7

    def test_json_record_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("agent_sns.test", logging.ERROR, "mod.py", 1, "failed", None, sys.exc_info())
        entry = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]


class TestFileLogging:
    def test_file_handler_when_enabled(self, tmp_path):
        setup_logging(config=LoggingConfig(file_enabled=True, file_dir=str(tmp_path)))

        file_handlers = [h for h in owned_handlers() if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert (tmp_path / "agent_sns.log").exists()

    def test_caller_can_refuse_file_logging(self, tmp_path):
        setup_logging(enable_file=False, config=LoggingConfig(file_enabled=True, file_dir=str(tmp_path)))
        assert not any(isinstance(h, logging.FileHandler) for h in owned_handlers())

    def test_no_file_handler_when_disabled_in_config(self, tmp_path):
        setup_logging(config=LoggingConfig(file_enabled=False, file_dir=str(tmp_path)))
        assert not any(isinstance(h, logging.FileHandler) for h in owned_handlers())
        assert not (tmp_path / "agent_sns.log").exists()


class TestModuleLogLevels:
    def test_module_levels_applied(self):
        setup_logging(config=no_file_config())
        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)

    def test_sqlalchemy_engine_is_quiet(self):
        assert MODULE_LOG_LEVELS["sqlalchemy.engine"] == "WARNING"


def test_settings_expose_logging_group(monkeypatch):
    from agent_sns.server.core.config import Settings

    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("ENABLE_FILE_LOGGING", "true")
    config = Settings().logging
    assert config.format == "json"
    assert config.file_enabled is True


def test_get_logger_returns_named_logger():
    logger = get_logger("agent_sns.server.api.threads")
    assert logger.name == "agent_sns.server.api.threads"
