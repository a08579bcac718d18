"""
Base database models and utilities.

This module provides the foundational database components used across
all entities in the centralized database layer using SQLModel.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def new_id() -> str:
    """Generate a primary key for a new row."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Get current UTC datetime as naive datetime.

    Naive values keep comparisons consistent across SQLite and Postgres
    ``timestamp without time zone`` columns.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
