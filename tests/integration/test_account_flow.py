"""Integration tests for the /accounts endpoints.

Pre-condition: PostgreSQL up and `alembic upgrade head` applied
"""

import pytest
from httpx import AsyncClient

from tests.integration.helpers import auth, register_and_login

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _connect(client: AsyncClient, user: dict[str, str], **body) -> dict:
    payload = {"name": "My Visa", "provider": "Visa", **body}
    resp = await client.post("/api/v1/accounts", json=payload, headers=auth(user))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestAccounts:
    async def test_unauthenticated_returns_401(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/accounts")
        assert resp.status_code == 401

    async def test_new_user_has_no_accounts(self, client: AsyncClient) -> None:
        user = await register_and_login(client, "acct")
        resp = await client.get("/api/v1/accounts", headers=auth(user))
        assert resp.status_code == 200
        assert resp.json()["data"]["items"] == []

    async def test_connect_and_read(self, client: AsyncClient) -> None:
        user = await register_and_login(client, "acct")
        account = await _connect(client, user, balance_cents=6500)
        assert account["balance_display"] == "$65.00"

        resp = await client.get(f"/api/v1/accounts/{account['id']}", headers=auth(user))
        assert resp.status_code == 200
        assert resp.json()["data"]["balance_cents"] == 6500

    async def test_unknown_balance(self, client: AsyncClient) -> None:
        user = await register_and_login(client, "acct")
        account = await _connect(client, user)
        assert account["balance_cents"] is None

    async def test_other_users_account_is_invalid(self, client: AsyncClient) -> None:
        owner = await register_and_login(client, "acct")
        stranger = await register_and_login(client, "acct")
        account = await _connect(client, owner)
        resp = await client.get(f"/api/v1/accounts/{account['id']}", headers=auth(stranger))
        assert resp.status_code == 404
        assert resp.json()["kind"] == "INVALID_ACCOUNT"

    async def test_remove(self, client: AsyncClient) -> None:
        user = await register_and_login(client, "acct")
        account = await _connect(client, user)
        resp = await client.delete(f"/api/v1/accounts/{account['id']}", headers=auth(user))
        assert resp.status_code == 200
        assert resp.json()["data"]["removed"] is True

        listing = await client.get("/api/v1/accounts", headers=auth(user))
        assert listing.json()["data"]["items"] == []
