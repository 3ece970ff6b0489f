"""Pydantic schemas and cursor utilities for the mb_transfer API."""

import base64
import json
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from src.mb_common.cents import cents_to_display
from src.mb_common.ids import UuidStr, is_uuid
from src.mb_geo.domain.codec import fence_to_dict
from src.mb_geo.domain.models import CircleFence, Coordinate, GeoFence, PolygonFence
from src.mb_transfer.domain.models import Transaction

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(created_at: datetime, transaction_id: str) -> str:
    """Encode the (created_at, id) keyset of the last row into an opaque cursor."""
    payload = json.dumps({"ts": created_at.isoformat(), "id": transaction_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime, str] | None:
    """Decode a cursor back to (created_at, id). Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        ts, txn_id = datetime.fromisoformat(payload["ts"]), str(payload["id"])
    except Exception:
        return None
    if not is_uuid(txn_id):
        return None
    return ts, txn_id


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CircleFenceIn(BaseModel):
    kind: Literal["circle"]
    latitude: float
    longitude: float
    radius_km: float
    location_name: str = ""

    def to_domain(self) -> CircleFence:
        return CircleFence(
            center=Coordinate(self.latitude, self.longitude),
            radius_km=self.radius_km,
            location_name=self.location_name,
        )


class PolygonFenceIn(BaseModel):
    kind: Literal["polygon"]
    ring: list[tuple[float, float]] = Field(..., description="[[lat, lng], ...]")
    location_name: str = ""

    def to_domain(self) -> PolygonFence:
        return PolygonFence(
            ring=tuple(Coordinate(lat, lng) for lat, lng in self.ring),
            location_name=self.location_name,
        )


FenceIn = Annotated[CircleFenceIn | PolygonFenceIn, Field(discriminator="kind")]


class SendRequest(BaseModel):
    source_account_id: UuidStr
    recipient_identity: str
    amount_cents: int = Field(..., gt=0, description="Amount to send in cents")
    description: str = Field("", max_length=500)
    geo_fence: FenceIn | None = None
    expires_at: datetime | None = None


class MoneyRequestRequest(BaseModel):
    payer_identity: str
    amount_cents: int = Field(..., gt=0, description="Amount requested in cents")
    description: str = Field("", max_length=500)
    destination_account_id: UuidStr | None = None


class ClaimRequest(BaseModel):
    destination_account_id: UuidStr
    latitude: float | None = None
    longitude: float | None = None

    def coordinates(self) -> Coordinate | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)


class ApproveRequest(BaseModel):
    source_account_id: UuidStr


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


def _fence_out(fence: GeoFence | None) -> dict[str, Any] | None:
    return fence_to_dict(fence) if fence is not None else None


class TransactionResponse(BaseModel):
    id: str
    type: str
    status: str
    amount_cents: int
    amount_display: str
    fee_cents: int
    fee_display: str
    sender_identity: str
    recipient_identity: str
    source_account_id: str | None
    destination_account_id: str | None
    geo_fence: dict[str, Any] | None
    expires_at: datetime | None
    description: str
    reference_id: str | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionResponse":
        return cls(
            id=txn.id,
            type=str(getattr(txn.type, "value", txn.type)),
            status=str(getattr(txn.status, "value", txn.status)),
            amount_cents=txn.amount,
            amount_display=cents_to_display(txn.amount),
            fee_cents=txn.fee,
            fee_display=cents_to_display(txn.fee),
            sender_identity=txn.sender_identity,
            recipient_identity=txn.recipient_identity,
            source_account_id=txn.source_account_id,
            destination_account_id=txn.destination_account_id,
            geo_fence=_fence_out(txn.geo_fence),
            expires_at=txn.time_restriction.expires_at if txn.time_restriction else None,
            description=txn.description,
            reference_id=txn.reference_id,
            created_at=txn.created_at,
            updated_at=txn.updated_at,
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    next_cursor: str | None
    has_more: bool
