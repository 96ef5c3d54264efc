"""Admin console: authorization, stats, payment config, listing CRUD."""

import pytest

from backend.models import Listing
from domain.access import Role, SessionContext
from domain.errors import Forbidden, NotFound, ValidationError
from services.account_service import AccountService
from services.admin_service import AdminConsole, config_defaults
from services.workflow_service import ApprovalWorkflow


@pytest.fixture
def console(repos, admin_ctx):
    return AdminConsole(
        admin_ctx, repos["accounts"], repos["transactions"], repos["listings"], repos["configs"]
    )


@pytest.fixture
def workflow(repos):
    return ApprovalWorkflow(repos["accounts"], repos["transactions"])


async def new_user(repos, email):
    account, _ = await AccountService(repos["accounts"]).register(
        email=email,
        password="hunter22",
        payment_method="usdt",
        wallet_address="TWallet",
        transaction_hash="0xhash",
    )
    return account


class TestAuthorization:
    def test_user_context_is_forbidden(self, repos):
        ctx = SessionContext(account_id="u1", role=Role.USER)
        with pytest.raises(Forbidden):
            AdminConsole(ctx, repos["accounts"], repos["transactions"], repos["listings"], repos["configs"])

    def test_missing_context_is_forbidden(self, repos):
        with pytest.raises(Forbidden):
            AdminConsole(None, repos["accounts"], repos["transactions"], repos["listings"], repos["configs"])


class TestStats:
    @pytest.mark.asyncio
    async def test_empty_store(self, console, admin):
        stats = await console.stats()
        # the admin counts as a paid user
        assert stats["total_users"] == 1
        assert stats["paid_users"] == 1
        assert stats["pending_signups"] == 0
        assert stats["total_revenue"] == 0
        assert stats["conversion_rate"] == 100

    @pytest.mark.asyncio
    async def test_counts_and_revenue(self, console, workflow, repos):
        alice = await new_user(repos, "alice@mailbox.org")
        bob = await new_user(repos, "bob@mailbox.org")
        await new_user(repos, "carol@mailbox.org")

        paid = await workflow.submit_payment(alice.id, 60, "usdt")
        await workflow.approve_transaction(paid.id)
        await workflow.submit_payment(bob.id, 45.5, "usdt")
        await repos["listings"].add(Listing(city="NY", title="Active", price=1000))
        await repos["listings"].add(Listing(city="LA", title="Hidden", price=900, is_active=False))

        stats = await console.stats()
        assert stats["total_users"] == 4
        assert stats["paid_users"] == 2
        assert stats["pending_signups"] == 3
        assert stats["total_listings"] == 1
        assert stats["pending_transactions"] == 1
        assert stats["completed_transactions"] == 1
        assert stats["total_revenue"] == 60.0
        assert stats["conversion_rate"] == 50


class TestConfig:
    @pytest.mark.asyncio
    async def test_first_read_creates_defaults(self, console):
        config = await console.get_config()
        defaults = config_defaults()
        assert config.id == 1
        assert config.paypal_email == defaults["paypal_email"]
        assert config.price_usd == defaults["price_usd"]

    @pytest.mark.asyncio
    async def test_update_is_partial_and_singleton(self, console, repos):
        await console.update_config({"price_usd": 75.0, "btc_address": None})
        config = await console.update_config({"paypal_email": "pay@secretlease.io"})

        assert config.price_usd == 75.0
        assert config.paypal_email == "pay@secretlease.io"
        assert config.btc_address == config_defaults()["btc_address"]

        again = await repos["configs"].get_or_create(config_defaults())
        assert again.id == config.id

    @pytest.mark.asyncio
    async def test_non_positive_price_rejected(self, console):
        with pytest.raises(ValidationError):
            await console.update_config({"price_usd": 0})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [float("nan"), float("inf"), float("-inf")])
    async def test_non_finite_price_rejected(self, console, price):
        with pytest.raises(ValidationError) as exc:
            await console.update_config({"price_usd": price})
        assert "price_usd" in exc.value.fields
        assert (await console.get_config()).price_usd == config_defaults()["price_usd"]


class TestListingCrud:
    @pytest.mark.asyncio
    async def test_create_update_delete(self, console, repos):
        listing = await console.create_listing({
            "city": "LA",
            "title": "Sunny Studio",
            "price": 1200,
            "address": "12 Oak St",
            "contact": "owner@rentals.com",
            "unknown_field": "ignored",
        })
        assert listing.id
        assert listing.amenities == []

        updated = await console.update_listing(listing.id, {"price": 1100, "contact": None})
        assert updated.price == 1100
        assert updated.contact is None
        assert updated.title == "Sunny Studio"

        await console.delete_listing(listing.id)
        assert await repos["listings"].get(listing.id) is None

    @pytest.mark.asyncio
    async def test_missing_listing(self, console):
        with pytest.raises(NotFound):
            await console.update_listing("missing", {"price": 1})
        with pytest.raises(NotFound):
            await console.delete_listing("missing")

    @pytest.mark.asyncio
    async def test_list_accounts_filters(self, console, workflow, repos, admin):
        alice = await new_user(repos, "alice@mailbox.org")
        await new_user(repos, "bob@mailbox.org")
        await workflow.approve_signup(alice.id)

        approved = await console.list_accounts(approved=True)
        assert {a.email for a in approved} == {"alice@mailbox.org", admin.email}
        unpaid = await console.list_accounts(paid=False)
        assert [a.email for a in unpaid] == ["bob@mailbox.org"]
