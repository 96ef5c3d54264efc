"""Seeding helpers: demo catalog generation and the configured admin account."""

import pytest

from backend.security import verify_password
from backend.seed import ensure_admin_account, generate_listings
from data.sql_account_repository_impl import SQLAccountRepositoryImpl
from services.account_service import AccountService


class TestGenerateListings:
    def test_deterministic(self):
        assert generate_listings(25) == generate_listings(25)

    def test_alternates_cities(self):
        rows = generate_listings(6)
        assert [r["city"] for r in rows] == ["NY", "LA", "NY", "LA", "NY", "LA"]

    def test_prices_are_rounded_and_positive(self):
        for row in generate_listings(120):
            assert row["price"] > 0
            assert row["price"] % 10 == 0
            assert row["title"].endswith(row["area"])


class TestEnsureAdmin:
    @pytest.mark.asyncio
    async def test_noop_without_credentials(self, session):
        assert await ensure_admin_account(session, "", "") is None

    @pytest.mark.asyncio
    async def test_creates_once(self, session):
        first = await ensure_admin_account(session, "Boss@SecretLease.io", "s3cret-pass")
        second = await ensure_admin_account(session, "boss@secretlease.io", "other-pass")

        assert first.id == second.id
        assert first.email == "boss@secretlease.io"
        assert first.role == "admin"
        assert first.is_approved and first.has_paid
        assert verify_password("s3cret-pass", second.password_hash)

    @pytest.mark.asyncio
    async def test_does_not_promote_existing_user(self, session):
        await AccountService(SQLAccountRepositoryImpl(session)).register(
            email="boss@secretlease.io",
            password="hunter22",
            payment_method="btc",
            wallet_address="bc1q",
            transaction_hash="0x1",
        )
        found = await ensure_admin_account(session, "boss@secretlease.io", "s3cret-pass")
        assert found.role == "user"
