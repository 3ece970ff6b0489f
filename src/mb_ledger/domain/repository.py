"""Repository Protocol: dependency inversion for testability.

Unit tests inject an in-memory double that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_ledger.domain.models import Account


class LedgerRepositoryProtocol(Protocol):
    async def get_account(self, db: AsyncSession, account_id: str) -> Account | None: ...

    async def get_account_for_update(
        self, db: AsyncSession, account_id: str
    ) -> Account | None: ...

    async def list_accounts(self, db: AsyncSession, owner_id: str) -> list[Account]: ...

    async def create_account(
        self,
        db: AsyncSession,
        owner_id: str,
        name: str,
        provider: str,
        account_type: str,
        balance: int | None,
    ) -> Account: ...

    async def delete_account(self, db: AsyncSession, account_id: str) -> bool: ...

    async def debit(self, db: AsyncSession, account_id: str, amount: int) -> Account: ...

    async def credit(self, db: AsyncSession, account_id: str, amount: int) -> Account: ...

    async def set_balance(
        self, db: AsyncSession, account_id: str, balance: int | None
    ) -> Account: ...


class BalanceSource(Protocol):
    """Read side used by the core to check an account's current known balance."""

    async def get_balance(self, db: AsyncSession, account_id: str) -> int | None: ...
