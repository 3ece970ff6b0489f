"""Malformed row ids are rejected with the INVALID_INPUT envelope before any query runs."""

import pytest
from httpx import AsyncClient

from src.mb_common.database import get_db_session
from src.mb_common.principal import Principal
from src.mb_gateway.auth.dependencies import get_current_principal
from tests.fakes import FakeSession

ALICE = Principal(user_id="00000000-0000-4000-8000-00000000000a", email="alice@example.com")


@pytest.fixture
async def api(client: AsyncClient):
    from src.main import app

    async def _session():
        yield FakeSession()

    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_current_principal] = lambda: ALICE
    yield client
    app.dependency_overrides.clear()


def _assert_invalid_input(resp) -> None:
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == 9001
    assert body["kind"] == "INVALID_INPUT"


class TestMalformedPathIds:
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/api/v1/transfers/abc"),
            ("POST", "/api/v1/transfers/abc/decline"),
            ("GET", "/api/v1/accounts/not-a-uuid"),
            ("DELETE", "/api/v1/accounts/not-a-uuid"),
            ("POST", "/api/v1/savings/123/confirm"),
            ("POST", "/api/v1/savings/123/withdraw"),
        ],
    )
    async def test_rejected(self, api: AsyncClient, method: str, path: str) -> None:
        _assert_invalid_input(await api.request(method, path))


class TestMalformedBodyIds:
    async def test_send_source_account(self, api: AsyncClient) -> None:
        resp = await api.post(
            "/api/v1/transfers/send",
            json={
                "source_account_id": "acc-1",
                "recipient_identity": "bob@example.com",
                "amount_cents": 100,
            },
        )
        _assert_invalid_input(resp)
        assert "source_account_id" in resp.json()["message"]

    async def test_lock_account(self, api: AsyncClient) -> None:
        resp = await api.post(
            "/api/v1/savings",
            json={"account_id": "x", "amount_cents": 5000, "lock_period_months": 3},
        )
        _assert_invalid_input(resp)
