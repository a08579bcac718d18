"""
Engine and session factories shared by the API, the worker, Alembic and tests.
"""

from __future__ import annotations

import re
from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .base import Base

_POSTGRES_SCHEME = re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://")


def normalize_database_url(db_url: str) -> str:
    """Point Postgres URLs at the asyncpg driver.

    ``postgres://``, ``postgresql://`` and ``postgresql+<driver>://`` all become
    ``postgresql+asyncpg://``. Other URLs are returned unchanged.
    """
    return _POSTGRES_SCHEME.sub("postgresql+asyncpg://", db_url, count=1)


def engine_options(url: str) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` by dialect.

    An in-memory SQLite database lives inside one connection, so it gets a
    single shared connection. Server databases get connection health checks.
    """
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    if ":memory:" in url or url in ("sqlite://", "sqlite+aiosqlite://"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


def create_engine(db_url: str, **overrides: Any) -> AsyncEngine:
    url = normalize_database_url(db_url)
    return create_async_engine(url, **{**engine_options(url), **overrides})


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose instances stay readable after commit."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every missing ``sns_*`` table.

    Used by tests and by ``init_db`` for development databases; deployed
    Postgres databases are migrated with Alembic.
    """
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
