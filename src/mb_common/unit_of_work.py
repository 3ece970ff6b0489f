"""Unit-of-work helper.

Transaction ownership: application services and the transfer/savings engines
wrap every state change in ``unit_of_work(db)`` so that balance mutations and
status writes commit together or not at all.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on clean exit, roll back and re-raise on any exception."""
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise
