"""Time restriction evaluation."""

from datetime import datetime

from src.mb_common.datetime_utils import ensure_utc
from src.mb_geo.domain.models import TimeRestriction


def is_expired(restriction: TimeRestriction, now: datetime) -> bool:
    """Strictly after expires_at; a claim at the exact expiry instant is still valid."""
    return ensure_utc(now) > ensure_utc(restriction.expires_at)
