"""Integration tests for sends, claims and money requests.

Pre-condition: PostgreSQL up and `alembic upgrade head` applied
"""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

from tests.integration.helpers import auth, register_and_login

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _account(client: AsyncClient, user: dict[str, str], balance: int) -> str:
    resp = await client.post(
        "/api/v1/accounts",
        json={"name": "Checking", "provider": "Chase", "balance_cents": balance},
        headers=auth(user),
    )
    return str(resp.json()["data"]["id"])


async def _balance(client: AsyncClient, user: dict[str, str], account_id: str) -> int:
    resp = await client.get(f"/api/v1/accounts/{account_id}", headers=auth(user))
    return int(resp.json()["data"]["balance_cents"])


class TestSendAndClaim:
    async def test_plain_send_claim_is_idempotent(self, client: AsyncClient) -> None:
        alice = await register_and_login(client, "alice")
        bob = await register_and_login(client, "bob")
        alice_acc = await _account(client, alice, 50000)
        bob_acc = await _account(client, bob, 0)

        sent = await client.post(
            "/api/v1/transfers/send",
            json={
                "source_account_id": alice_acc,
                "recipient_identity": bob["email"],
                "amount_cents": 10000,
                "description": "dinner",
            },
            headers=auth(alice),
        )
        assert sent.status_code == 201, sent.text
        txn = sent.json()["data"]
        assert txn["status"] == "Pending"
        assert txn["fee_cents"] == 300

        for _ in range(2):
            claimed = await client.post(
                f"/api/v1/transfers/{txn['id']}/claim",
                json={"destination_account_id": bob_acc},
                headers=auth(bob),
            )
            assert claimed.status_code == 200, claimed.text
            assert claimed.json()["data"]["status"] == "Completed"

        assert await _balance(client, alice, alice_acc) == 50000 - 10300
        assert await _balance(client, bob, bob_acc) == 10000

    async def test_insufficient_funds(self, client: AsyncClient) -> None:
        alice = await register_and_login(client, "alice")
        bob = await register_and_login(client, "bob")
        alice_acc = await _account(client, alice, 10299)
        resp = await client.post(
            "/api/v1/transfers/send",
            json={
                "source_account_id": alice_acc,
                "recipient_identity": bob["email"],
                "amount_cents": 10000,
            },
            headers=auth(alice),
        )
        assert resp.status_code == 422
        assert resp.json()["kind"] == "INSUFFICIENT_FUNDS"

    async def test_geofenced_claim(self, client: AsyncClient) -> None:
        alice = await register_and_login(client, "alice")
        bob = await register_and_login(client, "bob")
        alice_acc = await _account(client, alice, 50000)
        bob_acc = await _account(client, bob, 0)
        sent = await client.post(
            "/api/v1/transfers/send",
            json={
                "source_account_id": alice_acc,
                "recipient_identity": bob["email"],
                "amount_cents": 1000,
                "geo_fence": {
                    "kind": "circle",
                    "latitude": 40.758,
                    "longitude": -73.9855,
                    "radius_km": 1.0,
                    "location_name": "Midtown",
                },
                "expires_at": (datetime.now(UTC) + timedelta(days=1)).isoformat(),
            },
            headers=auth(alice),
        )
        txn_id = sent.json()["data"]["id"]
        url = f"/api/v1/transfers/{txn_id}/claim"

        no_location = await client.post(
            url, json={"destination_account_id": bob_acc}, headers=auth(bob)
        )
        assert no_location.json()["kind"] == "LOCATION_REQUIRED"

        outside = await client.post(
            url,
            json={"destination_account_id": bob_acc, "latitude": 40.8116, "longitude": -73.9465},
            headers=auth(bob),
        )
        assert outside.json()["kind"] == "OUTSIDE_FENCE"

        inside = await client.post(
            url,
            json={"destination_account_id": bob_acc, "latitude": 40.758, "longitude": -73.9855},
            headers=auth(bob),
        )
        assert inside.status_code == 200
        assert inside.json()["data"]["status"] == "Completed"

    async def test_stranger_cannot_see_transfer(self, client: AsyncClient) -> None:
        alice = await register_and_login(client, "alice")
        bob = await register_and_login(client, "bob")
        eve = await register_and_login(client, "eve")
        alice_acc = await _account(client, alice, 5000)
        sent = await client.post(
            "/api/v1/transfers/send",
            json={
                "source_account_id": alice_acc,
                "recipient_identity": bob["email"],
                "amount_cents": 100,
            },
            headers=auth(alice),
        )
        resp = await client.get(
            f"/api/v1/transfers/{sent.json()['data']['id']}", headers=auth(eve)
        )
        assert resp.status_code == 404


class TestRequests:
    async def test_request_approve(self, client: AsyncClient) -> None:
        alice = await register_and_login(client, "alice")
        bob = await register_and_login(client, "bob")
        alice_acc = await _account(client, alice, 0)
        bob_acc = await _account(client, bob, 3000)

        req = await client.post(
            "/api/v1/transfers/request",
            json={
                "payer_identity": bob["email"],
                "amount_cents": 2500,
                "destination_account_id": alice_acc,
            },
            headers=auth(alice),
        )
        assert req.status_code == 201
        req_id = req.json()["data"]["id"]

        own = await client.post(
            f"/api/v1/transfers/{req_id}/approve",
            json={"source_account_id": alice_acc},
            headers=auth(alice),
        )
        assert own.status_code == 403

        approved = await client.post(
            f"/api/v1/transfers/{req_id}/approve",
            json={"source_account_id": bob_acc},
            headers=auth(bob),
        )
        assert approved.json()["data"]["status"] == "Completed"
        assert await _balance(client, bob, bob_acc) == 500
        assert await _balance(client, alice, alice_acc) == 2500

    async def test_history_lists_both_sides(self, client: AsyncClient) -> None:
        alice = await register_and_login(client, "alice")
        bob = await register_and_login(client, "bob")
        await client.post(
            "/api/v1/transfers/request",
            json={"payer_identity": bob["email"], "amount_cents": 100},
            headers=auth(alice),
        )
        for user in (alice, bob):
            resp = await client.get("/api/v1/transfers?limit=10", headers=auth(user))
            assert resp.status_code == 200
            assert len(resp.json()["data"]["items"]) == 1
