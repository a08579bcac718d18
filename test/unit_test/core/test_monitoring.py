"""
Unit tests for the Logfire monitoring module.

Logfire itself is replaced by a MagicMock in ``sys.modules``; nothing is sent.
"""

from unittest.mock import MagicMock, patch

import pytest

from agent_sns.core import monitoring
from agent_sns.server.core.config import MonitoringConfig, Settings


@pytest.fixture(autouse=True)
def inactive_monitoring():
    monitoring.reset()
    yield
    monitoring.reset()


@pytest.fixture
def fake_logfire():
    fake = MagicMock()
    with patch.dict("sys.modules", {"logfire": fake}):
        yield fake


def enabled(**overrides) -> MonitoringConfig:
    return MonitoringConfig(**{"enabled": True, "token": "token", **overrides})


class TestSettings:
    def test_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv("LOGFIRE_ENABLED", raising=False)
        config = Settings().monitoring
        assert config.enabled is False
        assert config.service_name == "agent-sns"
        assert config.trace_sqlalchemy is True

    @pytest.mark.parametrize("value", ["true", "1", "yes", "TRUE"])
    def test_enabled_values(self, monkeypatch, value):
        monkeypatch.setenv("LOGFIRE_ENABLED", value)
        assert Settings().monitoring.enabled is True


class TestInitializeLogfire:
    def test_disabled(self, fake_logfire):
        assert monitoring.initialize_logfire(config=MonitoringConfig(enabled=False)) is False
        fake_logfire.configure.assert_not_called()
        assert monitoring.is_active() is False

    def test_enabled_without_token(self, fake_logfire):
        with patch.object(monitoring, "logger") as mock_logger:
            assert monitoring.initialize_logfire(config=enabled(token="")) is False
        mock_logger.warning.assert_called_once()
        assert monitoring.is_active() is False

    def test_configures_and_instruments(self, fake_logfire):
        app = MagicMock()
        engine = MagicMock()

        assert monitoring.initialize_logfire(app, engine=engine, config=enabled(environment="staging")) is True

        kwargs = fake_logfire.configure.call_args[1]
        assert kwargs["token"] == "token"
        assert kwargs["environment"] == "staging"
        fake_logfire.instrument_sqlalchemy.assert_called_once_with(engine=engine.sync_engine)
        fake_logfire.instrument_fastapi.assert_called_once_with(app)
        assert monitoring.is_active() is True

    def test_trace_flags_skip_instrumentation(self, fake_logfire):
        monitoring.initialize_logfire(
            MagicMock(), engine=MagicMock(), config=enabled(trace_sqlalchemy=False, trace_fastapi=False)
        )
        fake_logfire.instrument_sqlalchemy.assert_not_called()
        fake_logfire.instrument_fastapi.assert_not_called()

    def test_instrumentation_failure_is_tolerated(self, fake_logfire):
        fake_logfire.instrument_sqlalchemy.side_effect = RuntimeError("no engine")
        app = MagicMock()

        assert monitoring.initialize_logfire(app, engine=MagicMock(), config=enabled()) is True
        fake_logfire.instrument_fastapi.assert_called_once_with(app)


class TestLoggingHelpers:
    def test_request_goes_to_logger_while_inactive(self, fake_logfire):
        with patch.object(monitoring, "logger") as mock_logger:
            monitoring.log_api_request("GET", "/api/x", 200, 1.5)
        assert "GET /api/x -> 200" in mock_logger.debug.call_args[0][0]
        fake_logfire.info.assert_not_called()

    def test_request_forwarded_when_active(self, fake_logfire):
        monitoring.initialize_logfire(config=enabled())
        monitoring.log_api_request("POST", "/api/threads", 201, 3.0)

        template = fake_logfire.info.call_args[0][0]
        assert template == "{method} {path} -> {status_code}"
        assert fake_logfire.info.call_args[1]["status_code"] == 201

    def test_logfire_errors_are_not_raised(self, fake_logfire):
        fake_logfire.info.side_effect = RuntimeError("exporter down")
        monitoring.initialize_logfire(config=enabled())
        monitoring.log_api_request("GET", "/health", 200, 0.1)

    def test_auth_failure(self, fake_logfire):
        monitoring.initialize_logfire(config=enabled())
        with patch.object(monitoring, "logger") as mock_logger:
            monitoring.log_auth_failure("session", "Invalid session", {"path": "/api/agents/me"})

        mock_logger.info.assert_called_once()
        fake_logfire.warn.assert_called_once_with(
            "Authentication rejected ({kind})", kind="session", reason="Invalid session", path="/api/agents/me"
        )

    def test_auth_failure_inactive_only_logs(self, fake_logfire):
        monitoring.log_auth_failure("agent_key", "Missing x-agent-key")
        fake_logfire.warn.assert_not_called()
