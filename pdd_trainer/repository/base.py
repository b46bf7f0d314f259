# -*- coding: utf-8 -*-
"""
pdd_trainer/repository/base.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Base repository operations for generic CRUD functionality.

This module provides reusable asynchronous CRUD helpers using SQLAlchemy 2.0
async ORM. Helpers never commit: the calling service owns the transaction and
commits once when the whole workflow succeeded.
"""

from __future__ import annotations

from typing import Any, List, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.domain.models import Base

T = TypeVar("T", bound=Base)

logger = configure_logger()

# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------


async def create_item(session: AsyncSession, model: Type[T], **kwargs: Any) -> T:
    """Create a new item and flush it so that its ID is available."""
    instance = model(**kwargs)
    session.add(instance)
    await session.flush()
    return instance


async def list_items(
    session: AsyncSession,
    model: Type[T],
    skip: int = 0,
    limit: int = 100,
    **filters,
) -> List[T]:
    """Retrieve a list of items filtered by the given criteria, ordered by ID."""
    stmt = select(model).filter_by(**filters).order_by(getattr(model, "id"))

    if skip > 0:
        stmt = stmt.offset(skip)
    if limit > 0:
        stmt = stmt.limit(limit)

    result = await session.execute(stmt)
    items = result.scalars().all()
    logger.debug(f"Retrieved {len(items)} {model.__name__} items")
    return list(items)


async def count_items(session: AsyncSession, model: Type[T], **filters) -> int:
    """Count rows of a model matching the given criteria."""
    stmt = select(func.count()).select_from(model).filter_by(**filters)
    return int((await session.execute(stmt)).scalar_one())
