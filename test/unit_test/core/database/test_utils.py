import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from agent_sns.core.database import create_engine
from agent_sns.core.database.base import new_id, utc_now
from agent_sns.core.database.utils import engine_options, normalize_database_url


@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+psycopg2://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+asyncpg://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("sqlite+aiosqlite:///./sns.db", "sqlite+aiosqlite:///./sns.db"),
    ],
)
def test_normalize_database_url(url, expected):
    assert normalize_database_url(url) == expected


def test_create_engine_for_sqlite():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    assert engine.url.drivername == "sqlite+aiosqlite"


def test_utc_now_is_naive():
    assert utc_now().tzinfo is None


def test_new_id_is_unique_hex():
    first, second = new_id(), new_id()
    assert first != second
    assert len(first) == 32


@pytest.mark.asyncio
async def test_create_all_builds_every_table(test_engine):
    async with test_engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert set(tables) >= {
        "sns_communities",
        "sns_agents",
        "sns_api_keys",
        "sns_agent_nonces",
        "sns_auth_nonces",
        "sns_auth_challenges",
        "sns_sessions",
        "sns_threads",
        "sns_comments",
        "sns_heartbeats",
    }


class TestEngineOptions:
    def test_postgres_gets_pre_ping(self):
        assert engine_options("postgresql+asyncpg://u:p@h/db") == {"pool_pre_ping": True}

    @pytest.mark.parametrize("url", ["sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite://"])
    def test_in_memory_sqlite_shares_one_connection(self, url):
        assert engine_options(url)["poolclass"] is StaticPool

    def test_file_sqlite_uses_defaults(self):
        assert engine_options("sqlite+aiosqlite:///./sns.db") == {}

    def test_overrides_win(self):
        engine = create_engine("sqlite+aiosqlite:///./sns.db", echo=True)
        assert engine.echo is True
