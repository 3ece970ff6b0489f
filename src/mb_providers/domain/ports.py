"""Collaborator ports: external payment rails and the balance feed.

Only the request/response contract lives here; wire protocols belong to
the infrastructure adapters. Implementations raise ProviderError for rail
failures (safe to retry, no local state changed) and BalanceUnavailableError
for transient feed outages.
"""

from dataclasses import dataclass
from typing import Protocol

# Capture statuses that end a funding order for good.
DECLINED_CAPTURE_STATUSES = frozenset({"DECLINED", "VOIDED", "FAILED"})

# Payout status reported when the batch ref was already accepted earlier.
PAYOUT_ALREADY_SENT = "ALREADY_SENT"


@dataclass(frozen=True)
class FundingOrder:
    order_ref: str            # provider order id, stored as external_order_ref
    approval_url: str | None  # where the payer approves the order


@dataclass(frozen=True)
class CaptureResult:
    order_ref: str
    status: str               # provider status, e.g. COMPLETED / DECLINED

    @property
    def completed(self) -> bool:
        return self.status == "COMPLETED"

    @property
    def declined(self) -> bool:
        return self.status in DECLINED_CAPTURE_STATUSES


@dataclass(frozen=True)
class PayoutResult:
    payout_ref: str
    status: str


class PaymentCaptureProvider(Protocol):
    async def create_order(
        self, amount_cents: int, description: str, reference_id: str
    ) -> FundingOrder: ...

    async def capture_order(self, order_ref: str) -> CaptureResult: ...


class PaymentPayoutProvider(Protocol):
    """send_payout is idempotent per batch_ref: re-sending an accepted batch
    returns a result with status PAYOUT_ALREADY_SENT instead of failing."""

    async def send_payout(
        self, batch_ref: str, receiver: str, amount_cents: int, note: str
    ) -> PayoutResult: ...


class BalanceFeed(Protocol):
    """Upstream aggregator balance for an account; None = institution gave no balance."""

    async def fetch_balance(self, account_id: str) -> int | None: ...
