"""Pydantic schemas for the mb_ledger accounts API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.mb_common.cents import cents_to_display
from src.mb_ledger.domain.models import Account


class ConnectAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    provider: str = Field(..., min_length=1, max_length=64)
    account_type: str = Field("checking", min_length=1, max_length=32)
    balance_cents: int | None = Field(None, ge=0, description="Null when unknown")


class AccountResponse(BaseModel):
    id: str
    name: str
    provider: str
    account_type: str
    balance_cents: int | None
    balance_display: str | None
    balance_synced_at: datetime | None
    created_at: datetime | None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            provider=account.provider,
            account_type=account.account_type,
            balance_cents=account.balance,
            balance_display=cents_to_display(account.balance)
            if account.balance is not None
            else None,
            balance_synced_at=account.balance_synced_at,
            created_at=account.created_at,
        )


class AccountListResponse(BaseModel):
    items: list[AccountResponse]


class RemoveAccountResponse(BaseModel):
    account_id: str
    removed: bool
