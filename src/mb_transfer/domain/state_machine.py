"""TransferStateMachine owns the Pending -> terminal lifecycle of send/request rows.

    Pending ──claim──────────▶ Completed
       │ ├──expiry on claim──▶ Returned
       │ ├──approve──────────▶ Completed   (requests)
       │ └──decline──────────▶ Declined    (requests)

Claim checks run in a fixed order, each a hard precondition:
  1. exists, type=send, status=Pending, recipient matches   -> NotClaimable
  2. time restriction expired                                -> Returned + Expired
  3. fence present: coordinates required, must be inside     -> LocationRequired / OutsideFence
  4. sender still holds amount + fee (atomic debit)          -> InsufficientFunds

Funds are NOT reserved at send time; the sender's balance is re-validated by
the conditional debit at claim time.

Every state change runs inside one unit of work: the ledger debit/credit and
the status compare-and-swap commit together or roll back together.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.datetime_utils import ensure_utc, utc_now
from src.mb_common.enums import TransactionStatus, TransactionType
from src.mb_common.errors import (
    ConfigurationError,
    ExpiredError,
    InsufficientFundsError,
    InvalidInputError,
    LocationRequiredError,
    NotClaimableError,
    OutsideFenceError,
    TransactionNotFoundError,
    TransactionNotPendingError,
)
from src.mb_common.keyed_lock import KeyedLock
from src.mb_common.principal import normalize_identity
from src.mb_common.unit_of_work import unit_of_work
from src.mb_geo.domain.expiry import is_expired
from src.mb_geo.domain.fence import is_within_fence, validate_fence
from src.mb_geo.domain.models import Coordinate, GeoFence, TimeRestriction
from src.mb_ledger.domain.repository import BalanceSource, LedgerRepositoryProtocol
from src.mb_transfer.domain.fee import TRANSFER_FEE_BPS, calc_transfer_fee
from src.mb_transfer.domain.models import Transaction
from src.mb_transfer.domain.repository import TransactionRepositoryProtocol

logger = logging.getLogger(__name__)

FEE_COLLECTOR_IDENTITY = "MoneyBuddy Fees"


def _new_id() -> str:
    return str(uuid.uuid4())


class TransferStateMachine:
    def __init__(
        self,
        repo: TransactionRepositoryProtocol,
        ledger: LedgerRepositoryProtocol,
        balances: BalanceSource,
        fee_bps: int = TRANSFER_FEE_BPS,
    ) -> None:
        self._repo = repo
        self._ledger = ledger
        self._balances = balances
        self._fee_bps = fee_bps
        self._locks = KeyedLock()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_send(
        self,
        db: AsyncSession,
        sender_identity: str,
        sender_account_id: str,
        amount: int,
        recipient_identity: str,
        description: str,
        fence: GeoFence | None = None,
        restriction: TimeRestriction | None = None,
        now: datetime | None = None,
    ) -> Transaction:
        now = ensure_utc(now or utc_now())
        sender_identity = normalize_identity(sender_identity)
        recipient_identity = normalize_identity(recipient_identity)
        self._validate_parties(amount, sender_identity, recipient_identity)
        if fence is not None:
            try:
                validate_fence(fence)
            except ConfigurationError as exc:
                raise InvalidInputError(exc.message) from exc
        if restriction is not None and ensure_utc(restriction.expires_at) <= now:
            raise InvalidInputError("expires_at must be in the future")

        fee = calc_transfer_fee(amount, self._fee_bps)
        required = amount + fee
        balance = await self._balances.get_balance(db, sender_account_id)
        if balance is None or balance < required:
            raise InsufficientFundsError(required, balance)

        txn = Transaction(
            id=_new_id(),
            type=TransactionType.SEND.value,
            amount=amount,
            fee=fee,
            sender_identity=sender_identity,
            recipient_identity=recipient_identity,
            status=TransactionStatus.PENDING.value,
            source_account_id=sender_account_id,
            geo_fence=fence,
            time_restriction=restriction,
            description=description,
            created_at=now,
        )
        async with unit_of_work(db):
            created = await self._repo.insert(db, txn)
        logger.info(
            "Send created: id=%s amount=%d fee=%d conditional=%s",
            created.id,
            amount,
            fee,
            created.is_conditional,
        )
        return created

    async def create_request(
        self,
        db: AsyncSession,
        requester_identity: str,
        amount: int,
        payer_identity: str,
        description: str,
        destination_account_id: str | None = None,
        now: datetime | None = None,
    ) -> Transaction:
        """Request money: sender_identity is the requester, recipient_identity the payer."""
        requester_identity = normalize_identity(requester_identity)
        payer_identity = normalize_identity(payer_identity)
        self._validate_parties(amount, requester_identity, payer_identity)
        txn = Transaction(
            id=_new_id(),
            type=TransactionType.REQUEST.value,
            amount=amount,
            sender_identity=requester_identity,
            recipient_identity=payer_identity,
            status=TransactionStatus.PENDING.value,
            destination_account_id=destination_account_id,
            description=description,
            created_at=ensure_utc(now or utc_now()),
        )
        async with unit_of_work(db):
            created = await self._repo.insert(db, txn)
        logger.info("Request created: id=%s amount=%d", created.id, amount)
        return created

    @staticmethod
    def _validate_parties(amount: int, from_identity: str, to_identity: str) -> None:
        if amount <= 0:
            raise InvalidInputError(f"amount must be > 0 cents, got {amount}")
        if not to_identity:
            raise InvalidInputError("counterparty identity is required")
        if from_identity == to_identity:
            raise InvalidInputError("cannot transfer to yourself")

    # ------------------------------------------------------------------
    # Claim
    # ------------------------------------------------------------------

    async def claim(
        self,
        db: AsyncSession,
        transaction_id: str,
        claimant_identity: str,
        destination_account_id: str,
        coordinates: Coordinate | None = None,
        now: datetime | None = None,
    ) -> Transaction:
        now = ensure_utc(now or utc_now())
        claimant_identity = normalize_identity(claimant_identity)
        expired = False
        async with self._locks.for_key(transaction_id):
            async with unit_of_work(db):
                txn = await self._repo.get_for_update(db, transaction_id)
                if (
                    txn is None
                    or txn.type != TransactionType.SEND
                    or txn.status != TransactionStatus.PENDING
                    or txn.recipient_identity != claimant_identity
                ):
                    raise NotClaimableError(transaction_id)

                if txn.time_restriction is not None and is_expired(txn.time_restriction, now):
                    # Discovering expiry closes the transfer; commit before reporting.
                    await self._transition(db, txn, TransactionStatus.RETURNED.value)
                    expired = True
                else:
                    self._check_fence(txn, coordinates)
                    settled = await self._settle_claim(db, txn, destination_account_id, now)

        if expired:
            logger.info("Claim on expired send: id=%s returned to sender", transaction_id)
            raise ExpiredError(transaction_id)
        logger.info(
            "Send claimed: id=%s amount=%d dest=%s",
            transaction_id,
            settled.amount,
            destination_account_id,
        )
        return settled

    @staticmethod
    def _check_fence(txn: Transaction, coordinates: Coordinate | None) -> None:
        if txn.geo_fence is None:
            return
        if coordinates is None:
            raise LocationRequiredError()
        if not is_within_fence(coordinates, txn.geo_fence):
            raise OutsideFenceError(txn.geo_fence.location_name)

    async def _settle_claim(
        self,
        db: AsyncSession,
        txn: Transaction,
        destination_account_id: str,
        now: datetime,
    ) -> Transaction:
        if txn.source_account_id is None:
            raise NotClaimableError(txn.id)
        await self._ledger.debit(db, txn.source_account_id, txn.amount + txn.fee)
        await self._ledger.credit(db, destination_account_id, txn.amount)
        completed = await self._transition(
            db,
            txn,
            TransactionStatus.COMPLETED.value,
            destination_account_id=destination_account_id,
        )
        await self._repo.insert(
            db,
            Transaction(
                id=_new_id(),
                type=TransactionType.RECEIVE.value,
                amount=txn.amount,
                sender_identity=txn.sender_identity,
                recipient_identity=txn.recipient_identity,
                status=TransactionStatus.COMPLETED.value,
                source_account_id=txn.source_account_id,
                destination_account_id=destination_account_id,
                description=txn.description,
                reference_id=txn.id,
                created_at=now,
            ),
        )
        if txn.fee > 0:
            await self._repo.insert(
                db,
                Transaction(
                    id=_new_id(),
                    type=TransactionType.FEE.value,
                    amount=txn.fee,
                    sender_identity=txn.sender_identity,
                    recipient_identity=FEE_COLLECTOR_IDENTITY,
                    status=TransactionStatus.COMPLETED.value,
                    source_account_id=txn.source_account_id,
                    description=f"Transfer fee for {txn.id}",
                    reference_id=txn.id,
                    created_at=now,
                ),
            )
        return completed

    async def _transition(
        self,
        db: AsyncSession,
        txn: Transaction,
        new_status: str,
        source_account_id: str | None = None,
        destination_account_id: str | None = None,
    ) -> Transaction:
        updated = await self._repo.transition_status(
            db,
            txn.id,
            TransactionStatus.PENDING.value,
            new_status,
            source_account_id=source_account_id,
            destination_account_id=destination_account_id,
        )
        if updated is None:
            # Lost the compare-and-swap; the unit of work rolls back any ledger change.
            raise NotClaimableError(txn.id)
        return updated

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def _load_pending_request(self, db: AsyncSession, transaction_id: str) -> Transaction:
        txn = await self._repo.get_for_update(db, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        if txn.type != TransactionType.REQUEST:
            raise InvalidInputError(f"transaction {transaction_id} is not a money request")
        if txn.status != TransactionStatus.PENDING:
            raise TransactionNotPendingError(transaction_id, str(txn.status))
        return txn

    async def approve_request(
        self, db: AsyncSession, transaction_id: str, payer_account_id: str
    ) -> Transaction:
        """Debit the payer for the amount (no fee); credit the requester's account if set.

        Insufficient funds leave the request Pending; there is no auto-decline.
        """
        async with self._locks.for_key(transaction_id):
            async with unit_of_work(db):
                txn = await self._load_pending_request(db, transaction_id)
                await self._ledger.debit(db, payer_account_id, txn.amount)
                if txn.destination_account_id is not None:
                    await self._ledger.credit(db, txn.destination_account_id, txn.amount)
                approved = await self._transition(
                    db, txn, TransactionStatus.COMPLETED.value, source_account_id=payer_account_id
                )
        logger.info("Request approved: id=%s amount=%d", transaction_id, approved.amount)
        return approved

    async def decline_request(self, db: AsyncSession, transaction_id: str) -> Transaction:
        async with self._locks.for_key(transaction_id):
            async with unit_of_work(db):
                txn = await self._load_pending_request(db, transaction_id)
                declined = await self._transition(db, txn, TransactionStatus.DECLINED.value)
        logger.info("Request declined: id=%s", transaction_id)
        return declined

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    async def expire_overdue(
        self, db: AsyncSession, now: datetime | None = None, batch_size: int = 500
    ) -> int:
        """Return every Pending send past its expiry. Called by an external poller."""
        now = ensure_utc(now or utc_now())
        returned = 0
        async with unit_of_work(db):
            for txn in await self._repo.list_overdue_pending(db, now, batch_size):
                updated = await self._repo.transition_status(
                    db, txn.id, TransactionStatus.PENDING.value, TransactionStatus.RETURNED.value
                )
                if updated is not None:
                    returned += 1
        if returned:
            logger.info("Expiry sweep returned %d send(s)", returned)
        return returned
