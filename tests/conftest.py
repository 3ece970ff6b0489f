"""Shared test fixtures."""

import os

# config.settings requires JWT_SECRET at import time.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-0123456789")
# Cheap hashes keep the auth tests fast.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from tests.fakes import (  # noqa: E402
    FakeLedgerRepository,
    FakeLockedSavingRepository,
    FakePaymentProvider,
    FakeSession,
    FakeTransactionRepository,
)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    from src.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def ledger() -> FakeLedgerRepository:
    return FakeLedgerRepository()


@pytest.fixture
def txn_repo() -> FakeTransactionRepository:
    return FakeTransactionRepository()


@pytest.fixture
def savings_repo() -> FakeLockedSavingRepository:
    return FakeLockedSavingRepository()


@pytest.fixture
def provider() -> FakePaymentProvider:
    return FakePaymentProvider()
