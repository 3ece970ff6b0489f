"""TransferApplicationService: the entry layer for sends, requests and claims.

Owns authorization (only the correct counterparty may act, accounts must belong
to the caller) and claim idempotency. Business rules and the unit of work live
in TransferStateMachine.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mb_common.enums import TransactionStatus, TransactionType
from src.mb_common.errors import (
    AccountNotFoundError,
    InvalidInputError,
    NotAuthorizedError,
    TransactionNotFoundError,
)
from src.mb_common.principal import Principal, normalize_identity
from src.mb_geo.domain.models import TimeRestriction
from src.mb_ledger.domain.models import Account
from src.mb_ledger.domain.repository import BalanceSource, LedgerRepositoryProtocol
from src.mb_ledger.infrastructure.balance_source import LedgerBalanceSource
from src.mb_ledger.infrastructure.persistence import LedgerRepository
from src.mb_transfer.application.schemas import (
    ApproveRequest,
    ClaimRequest,
    MoneyRequestRequest,
    SendRequest,
    TransactionListResponse,
    TransactionResponse,
    cursor_decode,
    cursor_encode,
)
from src.mb_transfer.domain.models import Transaction
from src.mb_transfer.domain.repository import TransactionRepositoryProtocol
from src.mb_transfer.domain.state_machine import TransferStateMachine
from src.mb_transfer.infrastructure.persistence import TransactionRepository

logger = logging.getLogger(__name__)


class TransferApplicationService:
    def __init__(
        self,
        repo: TransactionRepositoryProtocol | None = None,
        ledger: LedgerRepositoryProtocol | None = None,
        balances: BalanceSource | None = None,
        fee_bps: int | None = None,
    ) -> None:
        self._repo: TransactionRepositoryProtocol = repo or TransactionRepository()
        self._ledger: LedgerRepositoryProtocol = ledger or LedgerRepository()
        self._balances: BalanceSource = balances or LedgerBalanceSource(self._ledger)
        self._machine = TransferStateMachine(
            self._repo,
            self._ledger,
            self._balances,
            fee_bps if fee_bps is not None else settings.TRANSFER_FEE_BPS,
        )

    @property
    def machine(self) -> TransferStateMachine:
        return self._machine

    async def _owned_account(
        self, db: AsyncSession, principal: Principal, account_id: str
    ) -> Account:
        account = await self._ledger.get_account(db, account_id)
        if account is None or account.owner_id != principal.user_id:
            raise AccountNotFoundError(account_id)
        return account

    # ------------------------------------------------------------------
    # Send / request
    # ------------------------------------------------------------------

    async def send(
        self, db: AsyncSession, principal: Principal, body: SendRequest
    ) -> TransactionResponse:
        await self._owned_account(db, principal, body.source_account_id)
        txn = await self._machine.create_send(
            db,
            sender_identity=principal.identity,
            sender_account_id=body.source_account_id,
            amount=body.amount_cents,
            recipient_identity=normalize_identity(body.recipient_identity),
            description=body.description,
            fence=body.geo_fence.to_domain() if body.geo_fence is not None else None,
            restriction=TimeRestriction(body.expires_at) if body.expires_at else None,
        )
        return TransactionResponse.from_domain(txn)

    async def request_money(
        self, db: AsyncSession, principal: Principal, body: MoneyRequestRequest
    ) -> TransactionResponse:
        if body.destination_account_id is not None:
            await self._owned_account(db, principal, body.destination_account_id)
        txn = await self._machine.create_request(
            db,
            requester_identity=principal.identity,
            amount=body.amount_cents,
            payer_identity=normalize_identity(body.payer_identity),
            description=body.description,
            destination_account_id=body.destination_account_id,
        )
        return TransactionResponse.from_domain(txn)

    # ------------------------------------------------------------------
    # Claim
    # ------------------------------------------------------------------

    async def claim(
        self,
        db: AsyncSession,
        principal: Principal,
        transaction_id: str,
        body: ClaimRequest,
        now: datetime | None = None,
    ) -> TransactionResponse:
        existing = await self._repo.get(db, transaction_id)
        if (
            existing is not None
            and existing.type == TransactionType.SEND
            and existing.status == TransactionStatus.COMPLETED
            and existing.recipient_identity == principal.identity
        ):
            logger.info("Idempotent re-claim: id=%s already Completed", transaction_id)
            return TransactionResponse.from_domain(existing)

        await self._owned_account(db, principal, body.destination_account_id)
        txn = await self._machine.claim(
            db,
            transaction_id,
            claimant_identity=principal.identity,
            destination_account_id=body.destination_account_id,
            coordinates=body.coordinates(),
            now=now,
        )
        return TransactionResponse.from_domain(txn)

    # ------------------------------------------------------------------
    # Approve / decline
    # ------------------------------------------------------------------

    async def _payer_request(
        self, db: AsyncSession, principal: Principal, transaction_id: str
    ) -> Transaction:
        txn = await self._repo.get(db, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        if txn.type != TransactionType.REQUEST:
            raise InvalidInputError(f"transaction {transaction_id} is not a money request")
        if txn.recipient_identity != principal.identity:
            raise NotAuthorizedError("only the payer may act on this request")
        return txn

    async def approve(
        self,
        db: AsyncSession,
        principal: Principal,
        transaction_id: str,
        body: ApproveRequest,
    ) -> TransactionResponse:
        await self._payer_request(db, principal, transaction_id)
        await self._owned_account(db, principal, body.source_account_id)
        txn = await self._machine.approve_request(db, transaction_id, body.source_account_id)
        return TransactionResponse.from_domain(txn)

    async def decline(
        self, db: AsyncSession, principal: Principal, transaction_id: str
    ) -> TransactionResponse:
        await self._payer_request(db, principal, transaction_id)
        txn = await self._machine.decline_request(db, transaction_id)
        return TransactionResponse.from_domain(txn)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_transaction(
        self, db: AsyncSession, principal: Principal, transaction_id: str
    ) -> TransactionResponse:
        txn = await self._repo.get(db, transaction_id)
        # Non-parties get NOT_FOUND so transaction ids cannot be enumerated.
        if txn is None or principal.identity not in (
            txn.sender_identity,
            txn.recipient_identity,
        ):
            raise TransactionNotFoundError(transaction_id)
        return TransactionResponse.from_domain(txn)

    async def list_history(
        self,
        db: AsyncSession,
        principal: Principal,
        cursor: str | None,
        limit: int,
    ) -> TransactionListResponse:
        decoded = cursor_decode(cursor)
        cursor_ts, cursor_id = decoded if decoded else (None, None)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._repo.list_for_identity(
            db, principal.identity, cursor_ts, cursor_id, limit + 1
        )
        has_more = len(rows) > limit
        page = rows[:limit]
        next_cursor = None
        if has_more and page and page[-1].created_at is not None:
            next_cursor = cursor_encode(page[-1].created_at, page[-1].id)
        return TransactionListResponse(
            items=[TransactionResponse.from_domain(t) for t in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def expire_overdue(self, db: AsyncSession, now: datetime | None = None) -> int:
        return await self._machine.expire_overdue(db, now)
