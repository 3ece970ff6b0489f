"""LockedSavingsEngine: provider-backed term deposits.

    Pending ──capture COMPLETED──▶ Locked ──payout ok──▶ Withdrawn
       │  (capture in progress: stays Pending)
       └────capture declined─────▶ Failed

The payment provider is the custodian of locked funds, so no internal account
balance moves here; the engine writes bookkeeping Transactions (lock, penalty,
receive) only after the provider confirms. Provider calls happen before the
unit of work opens: a ProviderError leaves every row as it was.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.cents import cents_to_display
from src.mb_common.datetime_utils import add_months, ensure_utc, utc_now
from src.mb_common.enums import LockedSavingStatus, TransactionStatus, TransactionType
from src.mb_common.errors import (
    AccountNotFoundError,
    InvalidInputError,
    InvariantViolationError,
    LockedSavingNotFoundError,
    LockNotPendingError,
    NotWithdrawableError,
)
from src.mb_common.keyed_lock import KeyedLock
from src.mb_common.unit_of_work import unit_of_work
from src.mb_ledger.domain.repository import LedgerRepositoryProtocol
from src.mb_providers.domain.ports import (
    PAYOUT_ALREADY_SENT,
    PaymentCaptureProvider,
    PaymentPayoutProvider,
)
from src.mb_savings.domain.models import LockedSaving
from src.mb_savings.domain.penalty import (
    EARLY_WITHDRAWAL_PENALTY_BPS,
    LOCK_PERIODS,
    compute_withdrawal,
    validate_period,
)
from src.mb_savings.domain.repository import LockedSavingRepositoryProtocol
from src.mb_transfer.domain.models import Transaction
from src.mb_transfer.domain.repository import TransactionRepositoryProtocol

logger = logging.getLogger(__name__)

SAVINGS_IDENTITY = "MoneyBuddy Savings"


def payout_batch_ref(saving_id: str) -> str:
    """Deterministic: a retried withdrawal re-sends the same batch, which the
    payout provider reports as already sent instead of paying twice."""
    return f"withdrawal_{saving_id}"


class LockedSavingsEngine:
    def __init__(
        self,
        repo: LockedSavingRepositoryProtocol,
        transactions: TransactionRepositoryProtocol,
        capture: PaymentCaptureProvider,
        payout: PaymentPayoutProvider,
        periods: tuple[int, ...] = LOCK_PERIODS,
        penalty_bps: int = EARLY_WITHDRAWAL_PENALTY_BPS,
        ledger: LedgerRepositoryProtocol | None = None,
    ) -> None:
        self._repo = repo
        self._transactions = transactions
        self._capture = capture
        self._payout = payout
        self._periods = periods
        self._penalty_bps = penalty_bps
        self._ledger = ledger
        self._locks = KeyedLock()

    async def initiate_lock(
        self,
        db: AsyncSession,
        owner_id: str,
        owner_identity: str,
        account_id: str,
        amount: int,
        period_months: int,
        now: datetime | None = None,
    ) -> tuple[LockedSaving, str | None]:
        """Open a provider funding order and record a Pending saving.

        Returns the saving and the provider approval URL. No balance check: the
        provider decides whether the external payment succeeds. With a ledger
        wired in, the account is re-read under a row lock before the insert.
        """
        if amount <= 0:
            raise InvalidInputError(f"amount must be > 0 cents, got {amount}")
        validate_period(period_months, self._periods)

        start = ensure_utc(now or utc_now())
        saving_id = str(uuid.uuid4())
        order = await self._capture.create_order(
            amount,
            f"Lock {cents_to_display(amount)} for {period_months} months",
            saving_id,
        )

        saving = LockedSaving(
            id=saving_id,
            account_id=account_id,
            owner_id=owner_id,
            owner_identity=owner_identity,
            amount=amount,
            lock_period_months=period_months,
            start_date=start,
            end_date=add_months(start, period_months),
            status=LockedSavingStatus.PENDING.value,
            external_order_ref=order.order_ref,
            created_at=start,
        )
        async with unit_of_work(db):
            if self._ledger is not None:
                # Row lock held to commit: removal cannot slip in between.
                account = await self._ledger.get_account_for_update(db, account_id)
                if account is None or account.owner_id != owner_id:
                    raise AccountNotFoundError(account_id)
            created = await self._repo.insert(db, saving)
        logger.info(
            "Lock initiated: id=%s amount=%d months=%d order=%s",
            created.id,
            amount,
            period_months,
            order.order_ref,
        )
        return created, order.approval_url

    async def confirm_lock(
        self, db: AsyncSession, saving_id: str, now: datetime | None = None
    ) -> LockedSaving:
        """Capture the provider order. Confirming a Locked saving again is a no-op."""
        now = ensure_utc(now or utc_now())
        async with self._locks.for_key(saving_id):
            saving = await self._repo.get(db, saving_id)
            if saving is None:
                raise LockedSavingNotFoundError(saving_id)
            if saving.status == LockedSavingStatus.LOCKED:
                logger.info("Lock already confirmed: id=%s", saving_id)
                return saving
            if saving.status != LockedSavingStatus.PENDING:
                raise LockNotPendingError(saving_id, str(saving.status))
            if not saving.external_order_ref:
                raise InvariantViolationError(f"saving {saving_id} has no provider order")

            capture = await self._capture.capture_order(saving.external_order_ref)
            if not capture.completed and not capture.declined:
                logger.warning(
                    "Lock capture still in progress: id=%s status=%s", saving_id, capture.status
                )
                return saving

            async with unit_of_work(db):
                if capture.declined:
                    failed = await self._repo.mark_failed(db, saving_id)
                    if failed is None:
                        raise LockNotPendingError(saving_id, "no longer Pending")
                    logger.warning(
                        "Lock capture declined: id=%s status=%s", saving_id, capture.status
                    )
                    return failed

                locked = await self._repo.mark_locked(db, saving_id)
                if locked is None:
                    raise LockNotPendingError(saving_id, "no longer Pending")
                await self._transactions.insert(
                    db,
                    Transaction(
                        id=str(uuid.uuid4()),
                        type=TransactionType.LOCK.value,
                        amount=saving.amount,
                        sender_identity=saving.owner_identity,
                        recipient_identity=SAVINGS_IDENTITY,
                        status=TransactionStatus.COMPLETED.value,
                        source_account_id=saving.account_id,
                        description=f"Locked for {saving.lock_period_months} months",
                        reference_id=saving.id,
                        external_order_ref=saving.external_order_ref,
                        created_at=now,
                    ),
                )
        logger.info("Lock confirmed: id=%s amount=%d", saving_id, locked.amount)
        return locked

    async def withdraw(
        self, db: AsyncSession, saving_id: str, now: datetime | None = None
    ) -> LockedSaving:
        """Pay out a Locked saving, forfeiting the penalty when before end_date.

        Withdrawn is reached only after the provider accepts the payout.
        """
        now = ensure_utc(now or utc_now())
        async with self._locks.for_key(saving_id):
            saving = await self._repo.get(db, saving_id)
            if saving is None:
                raise LockedSavingNotFoundError(saving_id)
            if saving.status != LockedSavingStatus.LOCKED:
                raise NotWithdrawableError(saving_id, str(saving.status))

            quote = compute_withdrawal(saving.amount, saving.end_date, now, self._penalty_bps)
            payout_ref = None
            if quote.payout > 0:
                result = await self._payout.send_payout(
                    payout_batch_ref(saving.id),
                    saving.owner_identity,
                    quote.payout,
                    "Early withdrawal" if quote.is_early else "Matured savings",
                )
                payout_ref = result.payout_ref
                if result.status == PAYOUT_ALREADY_SENT:
                    logger.info("Payout already sent, completing withdrawal: id=%s", saving_id)

            async with unit_of_work(db):
                withdrawn = await self._repo.mark_withdrawn(
                    db, saving_id, quote.penalty, quote.payout, now
                )
                if withdrawn is None:
                    raise NotWithdrawableError(saving_id, "no longer Locked")
                if quote.penalty > 0:
                    await self._transactions.insert(
                        db,
                        Transaction(
                            id=str(uuid.uuid4()),
                            type=TransactionType.PENALTY.value,
                            amount=quote.penalty,
                            sender_identity=saving.owner_identity,
                            recipient_identity=SAVINGS_IDENTITY,
                            status=TransactionStatus.COMPLETED.value,
                            source_account_id=saving.account_id,
                            description="Early withdrawal penalty",
                            reference_id=saving.id,
                            created_at=now,
                        ),
                    )
                if quote.payout > 0:
                    await self._transactions.insert(
                        db,
                        Transaction(
                            id=str(uuid.uuid4()),
                            type=TransactionType.RECEIVE.value,
                            amount=quote.payout,
                            sender_identity=SAVINGS_IDENTITY,
                            recipient_identity=saving.owner_identity,
                            status=TransactionStatus.COMPLETED.value,
                            destination_account_id=saving.account_id,
                            description="Locked savings withdrawal",
                            reference_id=saving.id,
                            external_order_ref=payout_ref,
                            created_at=now,
                        ),
                    )
        logger.info(
            "Withdrawal paid: id=%s early=%s penalty=%d payout=%d",
            saving_id,
            quote.is_early,
            quote.penalty,
            quote.payout,
        )
        return withdrawn
