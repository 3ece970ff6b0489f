"""Domain models for mb_transfer: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.mb_geo.domain.models import GeoFence, TimeRestriction


@dataclass
class Transaction:
    id: str
    type: str                              # TransactionType value
    amount: int                            # cents, > 0
    sender_identity: str                   # opaque, e.g. email
    recipient_identity: str
    status: str                            # TransactionStatus value
    fee: int = 0                           # cents, >= 0
    source_account_id: str | None = None   # None until settled for requests
    destination_account_id: str | None = None  # None until claimed for sends
    geo_fence: GeoFence | None = None
    time_restriction: TimeRestriction | None = None
    description: str = ""
    reference_id: str | None = None        # mirrored send / locked saving id
    external_order_ref: str | None = None  # provider order id for lock rows
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_conditional(self) -> bool:
        return self.geo_fence is not None or self.time_restriction is not None
