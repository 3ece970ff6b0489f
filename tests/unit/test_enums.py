"""Tests for mb_common.enums: values must match the DB CHECK constraints."""

from src.mb_common.enums import (
    FenceKind,
    LockedSavingStatus,
    TransactionStatus,
    TransactionType,
)


class TestAllEnumsAreStr:
    """All enums inherit from (str, Enum) so they compare equal to stored values."""

    def test_transaction_type_is_str(self) -> None:
        assert isinstance(TransactionType.SEND, str)
        assert TransactionType.SEND == "send"

    def test_status_compares_to_plain_string(self) -> None:
        assert "Pending" == TransactionStatus.PENDING
        assert TransactionStatus.PENDING.value == "Pending"


class TestValuesMatchCheckConstraints:
    def test_transaction_types(self) -> None:
        assert {t.value for t in TransactionType} == {
            "send", "receive", "request", "lock", "penalty", "fee",
        }

    def test_transaction_statuses(self) -> None:
        assert {s.value for s in TransactionStatus} == {
            "Pending", "Completed", "Failed", "Returned", "Locked", "Declined",
        }

    def test_locked_saving_statuses(self) -> None:
        assert {s.value for s in LockedSavingStatus} == {
            "Pending", "Locked", "Withdrawn", "Failed",
        }

    def test_fence_kinds(self) -> None:
        assert {k.value for k in FenceKind} == {"circle", "polygon"}
