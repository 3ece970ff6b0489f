"""Shared helpers for integration tests: fresh users and auth headers."""

import uuid

from httpx import AsyncClient


def unique_user(prefix: str = "user") -> dict[str, str]:
    """A registration body with an email no other test uses."""
    uid = uuid.uuid4().hex[:8]
    return {
        "email": f"{prefix}_{uid}@example.com",
        "display_name": prefix.title(),
        "password": "Wallet-pass-42",
    }


async def register_and_login(client: AsyncClient, prefix: str = "user") -> dict[str, str]:
    """Register a fresh user; return its email plus the bearer header."""
    user = unique_user(prefix)
    await client.post("/api/v1/auth/register", json=user)
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": user["email"], "password": user["password"]},
    )
    token = resp.json()["data"]["access_token"]
    return {"email": user["email"], "Authorization": f"Bearer {token}"}


def auth(user: dict[str, str]) -> dict[str, str]:
    return {"Authorization": user["Authorization"]}
