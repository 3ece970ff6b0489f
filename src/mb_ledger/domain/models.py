"""Domain models for mb_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    id: str
    owner_id: str
    name: str                       # "My Visa Card"
    provider: str                   # "Visa"
    account_type: str               # checking / savings / ...
    balance: int | None             # cents; None = unknown, needs sync (not zero)
    balance_synced_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def balance_known(self) -> bool:
        return self.balance is not None
