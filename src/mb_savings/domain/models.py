"""Domain models for mb_savings: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class LockedSaving:
    id: str
    account_id: str
    owner_id: str
    owner_identity: str                  # payout receiver (email)
    amount: int                          # cents, > 0
    lock_period_months: int
    start_date: datetime
    end_date: datetime                   # fixed at creation, never recomputed
    status: str                          # LockedSavingStatus value
    external_order_ref: str | None = None
    penalty_amount: int = 0
    payout_amount: int | None = None
    withdrawn_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class WithdrawalQuote:
    is_early: bool
    penalty: int
    payout: int
