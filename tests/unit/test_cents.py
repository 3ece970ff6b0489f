"""Tests for mb_common.cents and the transfer fee helpers."""

import pytest

from src.mb_common.cents import (
    apply_bps,
    cents_to_decimal_str,
    cents_to_display,
    validate_amount,
)
from src.mb_transfer.domain.fee import calc_transfer_fee, required_sender_balance


class TestValidateAmount:
    def test_positive_ok(self) -> None:
        validate_amount(1)
        validate_amount(10_000)

    def test_zero_raises(self) -> None:
        with pytest.raises(ValueError, match="greater than 0"):
            validate_amount(0)

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError):
            validate_amount(-5)


class TestCentsToDisplay:
    def test_basic(self) -> None:
        assert cents_to_display(6500) == "$65.00"

    def test_zero(self) -> None:
        assert cents_to_display(0) == "$0.00"

    def test_one_cent(self) -> None:
        assert cents_to_display(1) == "$0.01"

    def test_large(self) -> None:
        assert cents_to_display(150000) == "$1,500.00"

    def test_negative(self) -> None:
        assert cents_to_display(-1200) == "-$12.00"


class TestCentsToDecimalStr:
    def test_provider_wire_format(self) -> None:
        assert cents_to_decimal_str(19000) == "190.00"
        assert cents_to_decimal_str(5) == "0.05"
        assert cents_to_decimal_str(123456) == "1234.56"


class TestApplyBps:
    def test_exact(self) -> None:
        # 10000 * 300 / 10000 = 300
        assert apply_bps(10000, 300) == 300

    def test_ceiling_rounds_up(self) -> None:
        # 10001 * 300 / 10000 = 300.03 -> 301
        assert apply_bps(10001, 300) == 301

    def test_small_amount_rounds_to_one_cent(self) -> None:
        assert apply_bps(1, 300) == 1

    def test_zero_rate(self) -> None:
        assert apply_bps(6500, 0) == 0

    def test_zero_amount(self) -> None:
        assert apply_bps(0, 300) == 0


class TestTransferFee:
    def test_three_percent_of_one_hundred_dollars(self) -> None:
        assert calc_transfer_fee(10000) == 300

    def test_required_balance_includes_fee(self) -> None:
        assert required_sender_balance(10000) == 10300

    def test_custom_rate(self) -> None:
        assert calc_transfer_fee(10000, fee_bps=0) == 0
        assert required_sender_balance(10000, fee_bps=0) == 10000
