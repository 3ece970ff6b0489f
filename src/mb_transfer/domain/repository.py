"""Repository Protocol for the transactions ledger of record.

Rows are insert/update-only; there is no delete.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_transfer.domain.models import Transaction


class TransactionRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, txn: Transaction) -> Transaction: ...

    async def get(self, db: AsyncSession, transaction_id: str) -> Transaction | None: ...

    async def get_for_update(
        self, db: AsyncSession, transaction_id: str
    ) -> Transaction | None: ...

    async def transition_status(
        self,
        db: AsyncSession,
        transaction_id: str,
        expected: str,
        new: str,
        source_account_id: str | None = None,
        destination_account_id: str | None = None,
    ) -> Transaction | None:
        """Compare-and-swap; None when the row is not in `expected` status."""
        ...

    async def list_for_identity(
        self,
        db: AsyncSession,
        identity: str,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Transaction]: ...

    async def list_overdue_pending(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[Transaction]: ...
