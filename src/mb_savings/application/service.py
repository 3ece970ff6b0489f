"""SavingsApplicationService: ownership checks in front of LockedSavingsEngine."""

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mb_common.errors import AccountNotFoundError, LockedSavingNotFoundError
from src.mb_common.principal import Principal
from src.mb_ledger.domain.repository import LedgerRepositoryProtocol
from src.mb_ledger.infrastructure.persistence import LedgerRepository
from src.mb_providers.domain.ports import PaymentCaptureProvider, PaymentPayoutProvider
from src.mb_providers.infrastructure.paypal import PayPalClient
from src.mb_savings.application.schemas import (
    InitiateLockRequest,
    InitiateLockResponse,
    LockedSavingListResponse,
    LockedSavingResponse,
    WithdrawResponse,
)
from src.mb_savings.domain.engine import LockedSavingsEngine
from src.mb_savings.domain.models import LockedSaving
from src.mb_savings.domain.repository import LockedSavingRepositoryProtocol
from src.mb_savings.infrastructure.persistence import LockedSavingRepository
from src.mb_transfer.domain.repository import TransactionRepositoryProtocol
from src.mb_transfer.infrastructure.persistence import TransactionRepository


def default_paypal_client() -> PayPalClient:
    return PayPalClient(
        client_id=settings.PAYPAL_CLIENT_ID,
        client_secret=settings.PAYPAL_CLIENT_SECRET,
        api_url=settings.PAYPAL_API_URL,
        return_base_url=settings.APP_PUBLIC_URL,
        timeout=settings.PROVIDER_TIMEOUT_SECONDS,
    )


class SavingsApplicationService:
    def __init__(
        self,
        repo: LockedSavingRepositoryProtocol | None = None,
        transactions: TransactionRepositoryProtocol | None = None,
        ledger: LedgerRepositoryProtocol | None = None,
        capture: PaymentCaptureProvider | None = None,
        payout: PaymentPayoutProvider | None = None,
    ) -> None:
        self._repo: LockedSavingRepositoryProtocol = repo or LockedSavingRepository()
        self._ledger: LedgerRepositoryProtocol = ledger or LedgerRepository()
        if capture is None or payout is None:
            paypal = default_paypal_client()
            capture = capture or paypal
            payout = payout or paypal
        self._engine = LockedSavingsEngine(
            self._repo,
            transactions or TransactionRepository(),
            capture,
            payout,
            periods=tuple(settings.LOCK_PERIOD_MONTHS),
            penalty_bps=settings.EARLY_WITHDRAWAL_PENALTY_BPS,
            ledger=self._ledger,
        )

    @property
    def engine(self) -> LockedSavingsEngine:
        return self._engine

    async def _owned_saving(
        self, db: AsyncSession, principal: Principal, saving_id: str
    ) -> LockedSaving:
        saving = await self._repo.get(db, saving_id)
        if saving is None or saving.owner_id != principal.user_id:
            raise LockedSavingNotFoundError(saving_id)
        return saving

    async def initiate_lock(
        self, db: AsyncSession, principal: Principal, body: InitiateLockRequest
    ) -> InitiateLockResponse:
        account = await self._ledger.get_account(db, body.account_id)
        if account is None or account.owner_id != principal.user_id:
            raise AccountNotFoundError(body.account_id)
        saving, approval_url = await self._engine.initiate_lock(
            db,
            owner_id=principal.user_id,
            owner_identity=principal.identity,
            account_id=body.account_id,
            amount=body.amount_cents,
            period_months=body.lock_period_months,
        )
        return InitiateLockResponse(
            saving=LockedSavingResponse.from_domain(saving), approval_url=approval_url
        )

    async def confirm_lock(
        self, db: AsyncSession, principal: Principal, saving_id: str
    ) -> LockedSavingResponse:
        await self._owned_saving(db, principal, saving_id)
        saving = await self._engine.confirm_lock(db, saving_id)
        return LockedSavingResponse.from_domain(saving)

    async def withdraw(
        self, db: AsyncSession, principal: Principal, saving_id: str
    ) -> WithdrawResponse:
        await self._owned_saving(db, principal, saving_id)
        saving = await self._engine.withdraw(db, saving_id)
        return WithdrawResponse.from_domain(saving)

    async def list_savings(
        self, db: AsyncSession, principal: Principal
    ) -> LockedSavingListResponse:
        savings = await self._repo.list_for_owner(db, principal.user_id)
        return LockedSavingListResponse(
            items=[LockedSavingResponse.from_domain(s) for s in savings]
        )
