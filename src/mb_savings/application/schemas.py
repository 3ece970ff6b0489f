"""Pydantic schemas for the mb_savings API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.mb_common.cents import cents_to_display
from src.mb_common.ids import UuidStr
from src.mb_savings.domain.models import LockedSaving


class InitiateLockRequest(BaseModel):
    account_id: UuidStr
    amount_cents: int = Field(..., gt=0, description="Amount to lock in cents")
    lock_period_months: int = Field(..., description="One of the allowed lock periods")


class LockedSavingResponse(BaseModel):
    id: str
    account_id: str
    amount_cents: int
    amount_display: str
    lock_period_months: int
    start_date: datetime
    end_date: datetime
    status: str
    external_order_ref: str | None
    penalty_cents: int
    payout_cents: int | None
    withdrawn_at: datetime | None
    created_at: datetime | None

    @classmethod
    def from_domain(cls, saving: LockedSaving) -> "LockedSavingResponse":
        return cls(
            id=saving.id,
            account_id=saving.account_id,
            amount_cents=saving.amount,
            amount_display=cents_to_display(saving.amount),
            lock_period_months=saving.lock_period_months,
            start_date=saving.start_date,
            end_date=saving.end_date,
            status=str(getattr(saving.status, "value", saving.status)),
            external_order_ref=saving.external_order_ref,
            penalty_cents=saving.penalty_amount,
            payout_cents=saving.payout_amount,
            withdrawn_at=saving.withdrawn_at,
            created_at=saving.created_at,
        )


class InitiateLockResponse(BaseModel):
    saving: LockedSavingResponse
    approval_url: str | None


class WithdrawResponse(BaseModel):
    saving: LockedSavingResponse
    is_early: bool
    penalty_cents: int
    penalty_display: str
    payout_cents: int
    payout_display: str

    @classmethod
    def from_domain(cls, saving: LockedSaving) -> "WithdrawResponse":
        payout = saving.payout_amount or 0
        return cls(
            saving=LockedSavingResponse.from_domain(saving),
            is_early=saving.penalty_amount > 0,
            penalty_cents=saving.penalty_amount,
            penalty_display=cents_to_display(saving.penalty_amount),
            payout_cents=payout,
            payout_display=cents_to_display(payout),
        )


class LockedSavingListResponse(BaseModel):
    items: list[LockedSavingResponse]
