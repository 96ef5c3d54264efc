"""
Shared fixtures for the SecretLease test suite.

Key Components:
1. File-backed SQLite database per test (separate connections can race)
2. Session factory and repositories bound to that database
3. ASGI client with the request session dependency pointed at the test database
4. Admin account and signup helpers
"""

import os

# Must be set before config_env is imported anywhere
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""

import logging

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from backend.app import app
from backend.database import get_session, init_db
from backend.security import create_access_token
from backend.seed import ensure_admin_account
from data.sql_account_repository_impl import SQLAccountRepositoryImpl
from data.sql_catalog_repository_impl import SQLConfigRepositoryImpl, SQLListingRepositoryImpl
from data.sql_transaction_repository_impl import SQLTransactionRepositoryImpl
from domain.access import Role, SessionContext

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@secretlease.io"
ADMIN_PASSWORD = "admin-password"


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(bind=eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def repos(session):
    """All four repositories sharing one session, like a request does."""
    return {
        "accounts": SQLAccountRepositoryImpl(session),
        "transactions": SQLTransactionRepositoryImpl(session),
        "listings": SQLListingRepositoryImpl(session),
        "configs": SQLConfigRepositoryImpl(session),
    }


@pytest_asyncio.fixture
async def client(session_factory):
    async def _test_session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _test_session
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin(session_factory):
    async with session_factory() as s:
        return await ensure_admin_account(s, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def admin_ctx(admin):
    return SessionContext(account_id=admin.id, role=Role.ADMIN)


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin.id, admin.role)}"}


@pytest.fixture
def signup(client):
    """Register through the API; returns (token, user json)."""

    async def _signup(email="renter@mailbox.org", method="btc", password="hunter22"):
        body = {
            "email": email,
            "password": password,
            "payment_method": method,
            "transaction_hash": "0xabc123",
        }
        if method == "paypal":
            body["payment_email"] = "payer@mailbox.org"
        else:
            body["wallet_address"] = "bc1qexamplewallet"
        resp = await client.post("/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return data["token"], data["user"]

    return _signup
