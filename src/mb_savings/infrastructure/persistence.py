"""LockedSavingRepository: raw SQL persistence for locked_savings.

Status changes are guarded updates (`AND status = '<expected>'`) returning the
row, so a lost race surfaces as None instead of a silent overwrite.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.errors import InvariantViolationError
from src.mb_savings.domain.models import LockedSaving

_SELECT_COLUMNS = """
    id, account_id, owner_id, owner_identity, amount, lock_period_months,
    start_date, end_date, status, external_order_ref, penalty_amount,
    payout_amount, withdrawn_at, created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO locked_savings (id, account_id, owner_id, owner_identity, amount,
        lock_period_months, start_date, end_date, status, external_order_ref)
    VALUES (CAST(:id AS UUID), CAST(:account_id AS UUID), :owner_id, :owner_identity,
        :amount, :lock_period_months, :start_date, :end_date, :status, :external_order_ref)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM locked_savings WHERE id = CAST(:id AS UUID)
""")

_GET_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM locked_savings WHERE id = CAST(:id AS UUID)
    FOR UPDATE
""")

_LIST_FOR_OWNER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM locked_savings
    WHERE owner_id = :owner_id
    ORDER BY created_at DESC, id DESC
""")

_COUNT_NOT_WITHDRAWN_SQL = text("""
    SELECT COUNT(*) AS active
    FROM locked_savings
    WHERE account_id = CAST(:account_id AS UUID)
      AND status <> 'Withdrawn'
""")

_MARK_LOCKED_SQL = text(f"""
    UPDATE locked_savings
    SET status = 'Locked', updated_at = NOW()
    WHERE id = CAST(:id AS UUID) AND status = 'Pending'
    RETURNING {_SELECT_COLUMNS}
""")

_MARK_FAILED_SQL = text(f"""
    UPDATE locked_savings
    SET status = 'Failed', updated_at = NOW()
    WHERE id = CAST(:id AS UUID) AND status = 'Pending'
    RETURNING {_SELECT_COLUMNS}
""")

_MARK_WITHDRAWN_SQL = text(f"""
    UPDATE locked_savings
    SET status = 'Withdrawn',
        penalty_amount = :penalty_amount,
        payout_amount = :payout_amount,
        withdrawn_at = :withdrawn_at,
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID) AND status = 'Locked'
    RETURNING {_SELECT_COLUMNS}
""")


def _row_to_saving(row: Any) -> LockedSaving:
    return LockedSaving(
        id=str(row.id),
        account_id=str(row.account_id),
        owner_id=row.owner_id,
        owner_identity=row.owner_identity,
        amount=row.amount,
        lock_period_months=row.lock_period_months,
        start_date=row.start_date,
        end_date=row.end_date,
        status=row.status,
        external_order_ref=row.external_order_ref,
        penalty_amount=row.penalty_amount,
        payout_amount=row.payout_amount,
        withdrawn_at=row.withdrawn_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class LockedSavingRepository:
    """Concrete implementation of LockedSavingRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, saving: LockedSaving) -> LockedSaving:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": saving.id,
                "account_id": saving.account_id,
                "owner_id": saving.owner_id,
                "owner_identity": saving.owner_identity,
                "amount": saving.amount,
                "lock_period_months": saving.lock_period_months,
                "start_date": saving.start_date,
                "end_date": saving.end_date,
                "status": str(getattr(saving.status, "value", saving.status)),
                "external_order_ref": saving.external_order_ref,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InvariantViolationError("Locked saving insert returned no rows")
        return _row_to_saving(row)

    async def get(self, db: AsyncSession, saving_id: str) -> LockedSaving | None:
        result = await db.execute(_GET_SQL, {"id": saving_id})
        row = result.fetchone()
        return _row_to_saving(row) if row else None

    async def get_for_update(self, db: AsyncSession, saving_id: str) -> LockedSaving | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": saving_id})
        row = result.fetchone()
        return _row_to_saving(row) if row else None

    async def list_for_owner(self, db: AsyncSession, owner_id: str) -> list[LockedSaving]:
        result = await db.execute(_LIST_FOR_OWNER_SQL, {"owner_id": owner_id})
        return [_row_to_saving(row) for row in result.fetchall()]

    async def count_not_withdrawn(self, db: AsyncSession, account_id: str) -> int:
        result = await db.execute(_COUNT_NOT_WITHDRAWN_SQL, {"account_id": account_id})
        return int(result.scalar_one())

    async def mark_locked(self, db: AsyncSession, saving_id: str) -> LockedSaving | None:
        result = await db.execute(_MARK_LOCKED_SQL, {"id": saving_id})
        row = result.fetchone()
        return _row_to_saving(row) if row else None

    async def mark_failed(self, db: AsyncSession, saving_id: str) -> LockedSaving | None:
        result = await db.execute(_MARK_FAILED_SQL, {"id": saving_id})
        row = result.fetchone()
        return _row_to_saving(row) if row else None

    async def mark_withdrawn(
        self,
        db: AsyncSession,
        saving_id: str,
        penalty_amount: int,
        payout_amount: int,
        withdrawn_at: datetime,
    ) -> LockedSaving | None:
        result = await db.execute(
            _MARK_WITHDRAWN_SQL,
            {
                "id": saving_id,
                "penalty_amount": penalty_amount,
                "payout_amount": payout_amount,
                "withdrawn_at": withdrawn_at,
            },
        )
        row = result.fetchone()
        return _row_to_saving(row) if row else None
