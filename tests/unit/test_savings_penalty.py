"""Tests for lock period validation and early-withdrawal penalty math."""

from datetime import UTC, datetime, timedelta

import pytest

from src.mb_common.errors import InvalidPeriodError
from src.mb_savings.domain.penalty import LOCK_PERIODS, compute_withdrawal, validate_period

END = datetime(2026, 9, 1, 0, 0, tzinfo=UTC)


class TestValidatePeriod:
    @pytest.mark.parametrize("months", [3, 6, 12, 24])
    def test_allowed(self, months: int) -> None:
        validate_period(months)

    @pytest.mark.parametrize("months", [0, 1, 5, 36, -3])
    def test_rejected(self, months: int) -> None:
        with pytest.raises(InvalidPeriodError):
            validate_period(months)

    def test_custom_allowed_set(self) -> None:
        validate_period(1, allowed=(1,))
        with pytest.raises(InvalidPeriodError):
            validate_period(3, allowed=(1,))

    def test_default_periods(self) -> None:
        assert LOCK_PERIODS == (3, 6, 12, 24)


class TestComputeWithdrawal:
    def test_one_day_early(self) -> None:
        quote = compute_withdrawal(20000, END, END - timedelta(days=1))
        assert quote.is_early is True
        assert quote.penalty == 1000
        assert quote.payout == 19000

    def test_one_day_after_maturity(self) -> None:
        quote = compute_withdrawal(20000, END, END + timedelta(days=1))
        assert quote.is_early is False
        assert quote.penalty == 0
        assert quote.payout == 20000

    def test_exactly_at_end_date_is_mature(self) -> None:
        quote = compute_withdrawal(20000, END, END)
        assert quote.is_early is False
        assert quote.payout == 20000

    def test_one_second_before_end_is_early(self) -> None:
        quote = compute_withdrawal(20000, END, END - timedelta(seconds=1))
        assert quote.is_early is True

    def test_penalty_rounds_up(self) -> None:
        # 10001 * 5% = 500.05 -> 501
        quote = compute_withdrawal(10001, END, END - timedelta(days=1))
        assert quote.penalty == 501
        assert quote.payout == 9500

    def test_penalty_plus_payout_is_amount(self) -> None:
        for amount in (1, 99, 12345, 1_000_000):
            quote = compute_withdrawal(amount, END, END - timedelta(days=30))
            assert quote.penalty + quote.payout == amount

    def test_custom_rate(self) -> None:
        quote = compute_withdrawal(20000, END, END - timedelta(days=1), penalty_bps=1000)
        assert quote.penalty == 2000
