"""TransactionRepository: raw SQL persistence for the transactions table.

The geo fence lives in a JSONB column (see mb_geo.domain.codec); the time
restriction is the nullable expires_at column. Status changes are
compare-and-swap updates guarded by `status = :expected`.

Transaction ownership: the caller owns the unit of work; nothing here commits.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.errors import InvariantViolationError
from src.mb_geo.domain.codec import fence_from_dict, fence_to_dict
from src.mb_geo.domain.models import TimeRestriction
from src.mb_transfer.domain.models import Transaction

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, type, amount, fee, sender_identity, recipient_identity, status,
    source_account_id, destination_account_id, geo_fence, expires_at,
    description, reference_id, external_order_ref, created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO transactions (id, type, amount, fee, sender_identity, recipient_identity,
        status, source_account_id, destination_account_id, geo_fence, expires_at,
        description, reference_id, external_order_ref, created_at)
    VALUES (CAST(:id AS UUID), :type, :amount, :fee, :sender_identity, :recipient_identity,
        :status, CAST(:source_account_id AS UUID), CAST(:destination_account_id AS UUID),
        CAST(:geo_fence AS JSONB), :expires_at,
        :description, CAST(:reference_id AS UUID), :external_order_ref,
        COALESCE(:created_at, NOW()))
    RETURNING {_SELECT_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM transactions WHERE id = CAST(:id AS UUID)
""")

_GET_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM transactions WHERE id = CAST(:id AS UUID)
    FOR UPDATE
""")

# Account ids are only ever filled in, never cleared, by a transition.
_TRANSITION_SQL = text(f"""
    UPDATE transactions
    SET status = :new_status,
        source_account_id = COALESCE(CAST(:source_account_id AS UUID), source_account_id),
        destination_account_id = COALESCE(
            CAST(:destination_account_id AS UUID), destination_account_id),
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID) AND status = :expected
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_FOR_IDENTITY_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM transactions
    WHERE (sender_identity = :identity OR recipient_identity = :identity)
      AND (CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
           OR (created_at, id) < (CAST(:cursor_ts AS TIMESTAMPTZ), CAST(:cursor_id AS UUID)))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_OVERDUE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM transactions
    WHERE type = 'send'
      AND status = 'Pending'
      AND expires_at IS NOT NULL
      AND expires_at < :now
    ORDER BY expires_at ASC
    LIMIT :limit
    FOR UPDATE SKIP LOCKED
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _enum_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def _load_fence(raw: Any) -> Any:
    if raw is None:
        return None
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return fence_from_dict(data)


def _row_to_transaction(row: Any) -> Transaction:
    return Transaction(
        id=str(row.id),
        type=row.type,
        amount=row.amount,
        fee=row.fee,
        sender_identity=row.sender_identity,
        recipient_identity=row.recipient_identity,
        status=row.status,
        source_account_id=_optional_str(row.source_account_id),
        destination_account_id=_optional_str(row.destination_account_id),
        geo_fence=_load_fence(row.geo_fence),
        time_restriction=TimeRestriction(row.expires_at) if row.expires_at else None,
        description=row.description or "",
        reference_id=_optional_str(row.reference_id),
        external_order_ref=row.external_order_ref,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TransactionRepository:
    """Concrete implementation of TransactionRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, txn: Transaction) -> Transaction:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": txn.id,
                "type": _enum_value(txn.type),
                "amount": txn.amount,
                "fee": txn.fee,
                "sender_identity": txn.sender_identity,
                "recipient_identity": txn.recipient_identity,
                "status": _enum_value(txn.status),
                "source_account_id": txn.source_account_id,
                "destination_account_id": txn.destination_account_id,
                "geo_fence": json.dumps(fence_to_dict(txn.geo_fence))
                if txn.geo_fence is not None
                else None,
                "expires_at": txn.time_restriction.expires_at
                if txn.time_restriction is not None
                else None,
                "description": txn.description,
                "reference_id": txn.reference_id,
                "external_order_ref": txn.external_order_ref,
                "created_at": txn.created_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InvariantViolationError("Transaction insert returned no rows")
        return _row_to_transaction(row)

    async def get(self, db: AsyncSession, transaction_id: str) -> Transaction | None:
        result = await db.execute(_GET_SQL, {"id": transaction_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def get_for_update(
        self, db: AsyncSession, transaction_id: str
    ) -> Transaction | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": transaction_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def transition_status(
        self,
        db: AsyncSession,
        transaction_id: str,
        expected: str,
        new: str,
        source_account_id: str | None = None,
        destination_account_id: str | None = None,
    ) -> Transaction | None:
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "id": transaction_id,
                "expected": _enum_value(expected),
                "new_status": _enum_value(new),
                "source_account_id": source_account_id,
                "destination_account_id": destination_account_id,
            },
        )
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def list_for_identity(
        self,
        db: AsyncSession,
        identity: str,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_FOR_IDENTITY_SQL,
            {
                "identity": identity,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def list_overdue_pending(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[Transaction]:
        result = await db.execute(_LIST_OVERDUE_SQL, {"now": now, "limit": limit})
        return [_row_to_transaction(row) for row in result.fetchall()]
