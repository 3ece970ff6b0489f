"""Integration tests for /savings paths that do not reach the payment provider.

Pre-condition: PostgreSQL up and `alembic upgrade head` applied
"""

import pytest
from httpx import AsyncClient

from tests.integration.helpers import auth, register_and_login

pytestmark = pytest.mark.asyncio(loop_scope="session")


class TestSavings:
    async def test_empty_list(self, client: AsyncClient) -> None:
        user = await register_and_login(client, "saver")
        resp = await client.get("/api/v1/savings", headers=auth(user))
        assert resp.status_code == 200
        assert resp.json()["data"]["items"] == []

    async def test_invalid_period(self, client: AsyncClient) -> None:
        user = await register_and_login(client, "saver")
        acc = await client.post(
            "/api/v1/accounts",
            json={"name": "Checking", "provider": "Chase", "balance_cents": 100},
            headers=auth(user),
        )
        resp = await client.post(
            "/api/v1/savings",
            json={
                "account_id": acc.json()["data"]["id"],
                "amount_cents": 5000,
                "lock_period_months": 5,
            },
            headers=auth(user),
        )
        assert resp.status_code == 422
        assert resp.json()["kind"] == "INVALID_PERIOD"

    async def test_unknown_saving(self, client: AsyncClient) -> None:
        user = await register_and_login(client, "saver")
        resp = await client.post(
            "/api/v1/savings/00000000-0000-4000-8000-000000000000/withdraw",
            headers=auth(user),
        )
        assert resp.status_code == 404
