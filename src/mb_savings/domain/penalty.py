"""Lock periods and early-withdrawal penalty math (integer cents)."""

from datetime import datetime

from src.mb_common.cents import apply_bps
from src.mb_common.datetime_utils import ensure_utc
from src.mb_common.errors import InvalidPeriodError
from src.mb_savings.domain.models import WithdrawalQuote

LOCK_PERIODS: tuple[int, ...] = (3, 6, 12, 24)
EARLY_WITHDRAWAL_PENALTY_BPS = 500  # 5%


def validate_period(months: int, allowed: tuple[int, ...] = LOCK_PERIODS) -> None:
    if months not in allowed:
        raise InvalidPeriodError(months, allowed)


def compute_withdrawal(
    amount: int,
    end_date: datetime,
    now: datetime,
    penalty_bps: int = EARLY_WITHDRAWAL_PENALTY_BPS,
) -> WithdrawalQuote:
    """Early iff now < end_date; at or after maturity nothing is forfeited.

    20000 cents one day early at 500 bps -> penalty 1000, payout 19000.
    """
    is_early = ensure_utc(now) < ensure_utc(end_date)
    penalty = apply_bps(amount, penalty_bps) if is_early else 0
    return WithdrawalQuote(is_early=is_early, penalty=penalty, payout=amount - penalty)
