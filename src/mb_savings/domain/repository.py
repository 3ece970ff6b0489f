"""Repository Protocol for locked savings.

Unit tests inject an in-memory double that conforms to this Protocol.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_savings.domain.models import LockedSaving


class LockedSavingRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, saving: LockedSaving) -> LockedSaving: ...

    async def get(self, db: AsyncSession, saving_id: str) -> LockedSaving | None: ...

    async def get_for_update(
        self, db: AsyncSession, saving_id: str
    ) -> LockedSaving | None: ...

    async def list_for_owner(self, db: AsyncSession, owner_id: str) -> list[LockedSaving]: ...

    async def count_not_withdrawn(self, db: AsyncSession, account_id: str) -> int: ...

    async def mark_locked(self, db: AsyncSession, saving_id: str) -> LockedSaving | None:
        """Pending -> Locked; None when the row is no longer Pending."""
        ...

    async def mark_failed(self, db: AsyncSession, saving_id: str) -> LockedSaving | None:
        """Pending -> Failed; None when the row is no longer Pending."""
        ...

    async def mark_withdrawn(
        self,
        db: AsyncSession,
        saving_id: str,
        penalty_amount: int,
        payout_amount: int,
        withdrawn_at: datetime,
    ) -> LockedSaving | None:
        """Locked -> Withdrawn; None when the row is no longer Locked."""
        ...
