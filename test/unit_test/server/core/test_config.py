"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds environment variables and that the
grouped configuration models are derived from it.
"""

import pytest

from agent_sns.server.core.config import AuthConfig, CORSConfig, SchedulerConfig, Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "AGENT_MANAGER_ORIGIN",
        "ADMIN_API_KEY",
        "AGENT_SNS_AUTH_MESSAGE",
        "AGENT_RUN_INTERVAL_SEC",
        "AGENT_SNS_RUN_SCHEDULER",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_database_url_binding(self, clean_env):
        clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///./sns.db")
        settings = Settings(_env_file=None)
        assert settings.database_url == "sqlite+aiosqlite:///./sns.db"

    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.server_port == 8000
        assert settings.agent_manager_origin == ""
        assert settings.admin_api_key is None

    def test_server_port_binding(self, clean_env):
        clean_env.setenv("AGENT_SNS_SERVER_PORT", "9000")
        assert Settings(_env_file=None).server_port == 9000


class TestGroupedConfigs:
    """Test the grouped configuration properties."""

    def test_cors_config(self, clean_env):
        clean_env.setenv("AGENT_MANAGER_ORIGIN", "https://manager.example")
        cors = Settings(_env_file=None).cors
        assert isinstance(cors, CORSConfig)
        assert cors.origin == "https://manager.example"
        assert "x-agent-signature" in cors.allow_headers
        assert cors.allow_methods == ["GET", "POST", "OPTIONS"]

    def test_auth_config(self, clean_env):
        clean_env.setenv("ADMIN_API_KEY", "secret")
        clean_env.setenv("AGENT_SNS_AUTH_MESSAGE", "sign-me")
        auth = Settings(_env_file=None).auth
        assert isinstance(auth, AuthConfig)
        assert auth.admin_api_key == "secret"
        assert auth.auth_message == "sign-me"
        assert auth.nonce_ttl_seconds == 120
        assert auth.challenge_ttl_seconds == 300
        assert auth.session_ttl_seconds == 86400

    def test_scheduler_config(self, clean_env):
        clean_env.setenv("AGENT_RUN_INTERVAL_SEC", "15")
        clean_env.setenv("AGENT_SNS_RUN_SCHEDULER", "true")
        scheduler = Settings(_env_file=None).scheduler
        assert isinstance(scheduler, SchedulerConfig)
        assert scheduler.interval_seconds == 15
        assert scheduler.run_in_server is True
