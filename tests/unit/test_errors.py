"""Tests for mb_common.errors and mb_common.response."""

from src.mb_common.errors import (
    AccountHasActiveSavingsError,
    AccountNotFoundError,
    AppError,
    ExpiredError,
    InsufficientFundsError,
    InvalidPeriodError,
    LocationRequiredError,
    NotClaimableError,
    OutsideFenceError,
    ProviderError,
)
from src.mb_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.kind == "INTERNAL_ERROR"

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_insufficient_funds(self) -> None:
        err = InsufficientFundsError(required=10300, available=10299)
        assert err.code == 2001
        assert err.kind == "INSUFFICIENT_FUNDS"
        assert err.http_status == 422
        assert "10300" in err.message
        assert "10299" in err.message
        assert err.required == 10300
        assert err.available == 10299

    def test_insufficient_funds_unknown_balance(self) -> None:
        err = InsufficientFundsError(required=500, available=None)
        assert "unknown" in err.message
        assert err.available is None

    def test_invalid_account(self) -> None:
        err = AccountNotFoundError("acc-1")
        assert err.kind == "INVALID_ACCOUNT"
        assert err.http_status == 404

    def test_active_savings_guard(self) -> None:
        err = AccountHasActiveSavingsError("acc-1", 2)
        assert err.kind == "ACCOUNT_HAS_ACTIVE_SAVINGS"
        assert err.http_status == 409
        assert "2" in err.message

    def test_claim_errors_have_distinct_kinds(self) -> None:
        kinds = {
            NotClaimableError("t").kind,
            ExpiredError("t").kind,
            LocationRequiredError().kind,
            OutsideFenceError("Campus").kind,
        }
        assert kinds == {"NOT_CLAIMABLE", "EXPIRED", "LOCATION_REQUIRED", "OUTSIDE_FENCE"}

    def test_outside_fence_names_location(self) -> None:
        assert "Campus" in OutsideFenceError("Campus").message
        assert "the required area" in OutsideFenceError("").message

    def test_invalid_period_lists_allowed(self) -> None:
        err = InvalidPeriodError(5, (3, 6, 12, 24))
        assert err.kind == "INVALID_PERIOD"
        assert "[3, 6, 12, 24]" in err.message

    def test_provider_error(self) -> None:
        err = ProviderError("timeout")
        assert err.code == 6001
        assert err.http_status == 502
        assert err.kind == "PROVIDER_ERROR"


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.kind == "OK"
        assert resp.data == {"id": "abc"}

    def test_error(self) -> None:
        resp = error_response(4002, "NOT_CLAIMABLE", "Transaction t is not claimable")
        assert resp.code == 4002
        assert resp.kind == "NOT_CLAIMABLE"
        assert resp.data is None

    def test_serialization(self) -> None:
        d = ApiResponse(data={"amount_cents": 100}).model_dump()
        assert set(d) == {"code", "kind", "message", "data", "timestamp", "request_id"}
        assert d["request_id"].startswith("req_")
