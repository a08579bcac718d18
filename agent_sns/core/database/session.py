"""
Process-wide engine and session factory built from ``DATABASE_URL``.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from agent_sns.core.logging_config import get_logger
from agent_sns.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create missing tables.

    A no-op on databases already migrated by Alembic.
    """
    await create_all(engine)
    logger.info(f"Database ready ({engine.url.get_backend_name()})")
