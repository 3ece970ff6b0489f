# tests/unit/test_savings_persistence.py
"""Unit tests for LockedSavingRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mb_common.enums import LockedSavingStatus
from src.mb_savings.domain.models import LockedSaving
from src.mb_savings.infrastructure.persistence import LockedSavingRepository

START = datetime(2026, 1, 15, tzinfo=UTC)
END = datetime(2026, 4, 15, tzinfo=UTC)


def _make_saving_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "22222222-0000-4000-8000-000000000001")
    row.account_id = "33333333-0000-4000-8000-000000000001"
    row.owner_id = "user-1"
    row.owner_identity = "carol@example.com"
    row.amount = 20000
    row.lock_period_months = 3
    row.start_date = START
    row.end_date = END
    row.status = kwargs.get("status", "Pending")
    row.external_order_ref = "ORD-1"
    row.penalty_amount = kwargs.get("penalty_amount", 0)
    row.payout_amount = kwargs.get("payout_amount")
    row.withdrawn_at = kwargs.get("withdrawn_at")
    row.created_at = START
    row.updated_at = START
    return row


def _result(row=None, rows=None):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = row
    result_mock.fetchall.return_value = rows or []
    return result_mock


@pytest.fixture
def db():
    return MagicMock()


class TestInsertAndGet:
    @pytest.mark.asyncio
    async def test_insert_stores_status_value(self, db):
        db.execute = AsyncMock(return_value=_result(_make_saving_row()))
        saving = LockedSaving(
            id="s",
            account_id="a",
            owner_id="user-1",
            owner_identity="carol@example.com",
            amount=20000,
            lock_period_months=3,
            start_date=START,
            end_date=END,
            status=LockedSavingStatus.PENDING,
            external_order_ref="ORD-1",
        )
        created = await LockedSavingRepository().insert(db, saving)
        params = db.execute.call_args[0][1]
        assert params["status"] == "Pending"
        assert params["end_date"] == END
        assert created.external_order_ref == "ORD-1"

    @pytest.mark.asyncio
    async def test_get_missing(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await LockedSavingRepository().get(db, "s") is None


class TestGuardedUpdates:
    @pytest.mark.asyncio
    async def test_mark_locked_lost_race(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await LockedSavingRepository().mark_locked(db, "s") is None

    @pytest.mark.asyncio
    async def test_mark_withdrawn(self, db):
        row = _make_saving_row(
            status="Withdrawn", penalty_amount=1000, payout_amount=19000, withdrawn_at=END
        )
        db.execute = AsyncMock(return_value=_result(row))
        saving = await LockedSavingRepository().mark_withdrawn(db, "s", 1000, 19000, END)
        assert saving.status == "Withdrawn"
        assert saving.payout_amount == 19000
        params = db.execute.call_args[0][1]
        assert params["penalty_amount"] == 1000
        assert params["withdrawn_at"] == END


class TestCountNotWithdrawn:
    @pytest.mark.asyncio
    async def test_returns_int(self, db):
        result_mock = MagicMock()
        result_mock.scalar_one.return_value = 2
        db.execute = AsyncMock(return_value=result_mock)
        assert await LockedSavingRepository().count_not_withdrawn(db, "acc") == 2
