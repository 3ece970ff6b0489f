"""AccountApplicationService: connect, list, remove and refresh funding accounts.

Every operation is owner-scoped: an account that exists but belongs to another
user is reported as INVALID_ACCOUNT, same as a missing one.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mb_common.errors import (
    AccountHasActiveSavingsError,
    AccountNotFoundError,
    ConfigurationError,
)
from src.mb_common.principal import Principal
from src.mb_common.unit_of_work import unit_of_work
from src.mb_ledger.application.schemas import (
    AccountListResponse,
    AccountResponse,
    ConnectAccountRequest,
    RemoveAccountResponse,
)
from src.mb_ledger.domain.models import Account
from src.mb_ledger.domain.repository import LedgerRepositoryProtocol
from src.mb_ledger.infrastructure.persistence import LedgerRepository
from src.mb_providers.domain.ports import BalanceFeed
from src.mb_providers.domain.retry import RetryPolicy, fetch_balance_with_retry
from src.mb_providers.infrastructure.balance_feed import HttpBalanceFeed
from src.mb_savings.domain.repository import LockedSavingRepositoryProtocol
from src.mb_savings.infrastructure.persistence import LockedSavingRepository

logger = logging.getLogger(__name__)


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.BALANCE_FEED_MAX_ATTEMPTS,
        backoff_seconds=tuple(settings.BALANCE_FEED_BACKOFF_SECONDS),
    )


class AccountApplicationService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        savings: LockedSavingRepositoryProtocol | None = None,
        feed: BalanceFeed | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._savings: LockedSavingRepositoryProtocol = savings or LockedSavingRepository()
        if feed is None and settings.BALANCE_FEED_URL:
            feed = HttpBalanceFeed(
                settings.BALANCE_FEED_URL, timeout=settings.PROVIDER_TIMEOUT_SECONDS
            )
        self._feed = feed
        self._retry_policy = retry_policy or default_retry_policy()

    async def _owned(
        self, db: AsyncSession, principal: Principal, account_id: str, lock: bool = False
    ) -> Account:
        if lock:
            account = await self._repo.get_account_for_update(db, account_id)
        else:
            account = await self._repo.get_account(db, account_id)
        if account is None or account.owner_id != principal.user_id:
            raise AccountNotFoundError(account_id)
        return account

    async def connect_account(
        self, db: AsyncSession, principal: Principal, body: ConnectAccountRequest
    ) -> AccountResponse:
        async with unit_of_work(db):
            account = await self._repo.create_account(
                db,
                owner_id=principal.user_id,
                name=body.name,
                provider=body.provider,
                account_type=body.account_type,
                balance=body.balance_cents,
            )
        logger.info(
            "Account connected: id=%s owner=%s balance_known=%s",
            account.id,
            principal.user_id,
            account.balance_known,
        )
        return AccountResponse.from_domain(account)

    async def list_accounts(self, db: AsyncSession, principal: Principal) -> AccountListResponse:
        accounts = await self._repo.list_accounts(db, principal.user_id)
        return AccountListResponse(items=[AccountResponse.from_domain(a) for a in accounts])

    async def get_account(
        self, db: AsyncSession, principal: Principal, account_id: str
    ) -> AccountResponse:
        return AccountResponse.from_domain(await self._owned(db, principal, account_id))

    async def remove_account(
        self, db: AsyncSession, principal: Principal, account_id: str
    ) -> RemoveAccountResponse:
        """Refused while any locked saving on the account is not Withdrawn.

        The account row stays locked until commit, so a lock being opened on it
        concurrently either lands before the count or sees the account gone.
        """
        async with unit_of_work(db):
            await self._owned(db, principal, account_id, lock=True)
            active = await self._savings.count_not_withdrawn(db, account_id)
            if active > 0:
                raise AccountHasActiveSavingsError(account_id, active)
            removed = await self._repo.delete_account(db, account_id)
        logger.info("Account removed: id=%s owner=%s", account_id, principal.user_id)
        return RemoveAccountResponse(account_id=account_id, removed=removed)

    async def refresh_balance(
        self, db: AsyncSession, principal: Principal, account_id: str
    ) -> AccountResponse:
        """Overwrite the stored balance with the feed's value (None included)."""
        if self._feed is None:
            raise ConfigurationError("balance feed is not configured")
        # Feed retries back off for seconds; no transaction stays open across them.
        async with unit_of_work(db):
            await self._owned(db, principal, account_id)
        balance = await fetch_balance_with_retry(self._feed, account_id, self._retry_policy)
        async with unit_of_work(db):
            account = await self._repo.set_balance(db, account_id, balance)
        logger.info("Balance refreshed: id=%s known=%s", account_id, balance is not None)
        return AccountResponse.from_domain(account)
