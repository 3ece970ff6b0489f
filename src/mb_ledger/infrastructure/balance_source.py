"""Ledger-backed BalanceSource: the stored balance last written by the ledger or a sync."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.errors import AccountNotFoundError
from src.mb_ledger.domain.repository import LedgerRepositoryProtocol
from src.mb_ledger.infrastructure.persistence import LedgerRepository


class LedgerBalanceSource:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    async def get_balance(self, db: AsyncSession, account_id: str) -> int | None:
        account = await self._repo.get_account(db, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account.balance
