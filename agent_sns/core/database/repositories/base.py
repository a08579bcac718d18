"""
Repository base classes.

Every repository wraps one ``AsyncSession`` and one SQLModel table. Single-row
writes commit immediately and refresh the instance. Bulk deletes run as one
statement and report the affected row count.

``ExpiringRepository`` adds the helpers shared by the one-time credential
tables (login nonces, wallet challenges, sessions, agent nonces), whose rows
carry ``expires_at`` and, except sessions, ``used_at``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy import delete, func, update
from sqlalchemy import select as sa_select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from ..base import utc_now

EntityType = TypeVar("EntityType", bound=SQLModel)

# Bulk statements skip synchronizing objects already loaded in the session
BULK_OPTIONS = {"synchronize_session": False}


class AsyncBaseRepository(Generic[EntityType]):
    """Data access for a single table through an async session."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        self.session = session
        self.model = model

    async def save(self, entity: EntityType) -> EntityType:
        """Insert or update ``entity`` and return it with generated fields loaded."""
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: str) -> Optional[EntityType]:
        return await self.session.get(self.model, entity_id)

    async def find_one(self, *criteria: Any) -> Optional[EntityType]:
        """First row matching every SQL criterion, or None."""
        result = await self.session.execute(select(self.model).where(*criteria))
        return result.scalars().first()

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count rows whose columns equal the given values.

        Raises:
            AttributeError: A filter names a column the table does not have
        """
        stmt = sa_select(func.count()).select_from(self.model)
        for column, value in (filters or {}).items():
            stmt = stmt.where(getattr(self.model, column) == value)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def delete_where(self, *criteria: Any, commit: bool = True) -> int:
        """Delete every row matching the criteria in one statement.

        Args:
            criteria: SQL criteria combined with AND
            commit: Commit right away; pass False to batch with other writes

        Returns:
            Number of rows removed
        """
        result = await self.session.execute(delete(self.model).where(*criteria), execution_options=BULK_OPTIONS)
        if commit:
            await self.session.commit()
        return result.rowcount or 0


class ExpiringRepository(AsyncBaseRepository[EntityType]):
    """Repository for rows that stop being valid at ``expires_at``."""

    async def find_live(self, *criteria: Any, now: Optional[datetime] = None) -> Optional[EntityType]:
        """First unexpired row matching the criteria.

        Rows of tables with a ``used_at`` column must also be unused.
        """
        now = now or utc_now()
        conditions = [*criteria, self.model.expires_at > now]
        if hasattr(self.model, "used_at"):
            conditions.append(self.model.used_at.is_(None))
        return await self.find_one(*conditions)

    async def consume(self, record: EntityType, now: Optional[datetime] = None) -> bool:
        """Set ``used_at`` on a live row, unless another request already did.

        The update only matches while ``used_at`` is empty and the row has
        not expired, so of two concurrent consumers exactly one gets True.
        """
        now = now or utc_now()
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == record.id, self.model.used_at.is_(None), self.model.expires_at > now)
            .values(used_at=now),
            execution_options=BULK_OPTIONS,
        )
        await self.session.commit()
        if not result.rowcount:
            return False
        await self.session.refresh(record)
        return True

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete rows whose ``expires_at`` is at or before ``now``."""
        return await self.delete_where(self.model.expires_at <= (now or utc_now()))
