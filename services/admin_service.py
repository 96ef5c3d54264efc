"""Admin console: dashboard stats, payment config, accounts, listing CRUD."""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from backend.models import AdminConfig, Listing
from config_env import (
    DEFAULT_BTC_ADDRESS,
    DEFAULT_PAYPAL_EMAIL,
    DEFAULT_PRICE_USD,
    DEFAULT_USDT_ADDRESS,
)
from domain.access import SessionContext, TransactionStatus
from domain.account_repository import AccountRepository
from domain.catalog_repository import ConfigRepository, ListingRepository
from domain.errors import Forbidden, NotFound, ValidationError
from domain.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)

CONFIG_FIELDS = ("paypal_email", "btc_address", "usdt_address", "price_usd")

LISTING_FIELDS = (
    "city", "title", "area", "price", "beds", "baths", "sqft", "type",
    "address", "image_url", "description", "amenities", "contact", "is_active",
)
NULLABLE_LISTING_FIELDS = ("image_url", "description", "contact")


def config_defaults() -> dict:
    return {
        "paypal_email": DEFAULT_PAYPAL_EMAIL,
        "btc_address": DEFAULT_BTC_ADDRESS,
        "usdt_address": DEFAULT_USDT_ADDRESS,
        "price_usd": DEFAULT_PRICE_USD,
    }


async def load_payment_config(configs: ConfigRepository) -> AdminConfig:
    """Read the singleton, creating it with defaults on first use."""
    return await configs.get_or_create(config_defaults())


class AdminConsole:
    def __init__(
        self,
        ctx: SessionContext,
        accounts: AccountRepository,
        transactions: TransactionRepository,
        listings: ListingRepository,
        configs: ConfigRepository,
    ):
        # role comes from the verified token, never from the request body
        if ctx is None or not ctx.is_admin:
            raise Forbidden("Admin access required")
        self.ctx = ctx
        self.accounts = accounts
        self.transactions = transactions
        self.listings = listings
        self.configs = configs

    async def stats(self) -> dict:
        total_users = await self.accounts.count()
        paid_users = await self.accounts.count_paid()
        conversion = round(paid_users / total_users * 100) if total_users > 0 else 0
        return {
            "total_users": total_users,
            "paid_users": paid_users,
            "pending_signups": await self.accounts.count(approved=False, role="user"),
            "total_listings": await self.listings.count_active(),
            "pending_transactions": await self.transactions.count(TransactionStatus.PENDING.value),
            "completed_transactions": await self.transactions.count(TransactionStatus.COMPLETED.value),
            "total_revenue": await self.transactions.revenue(),
            "conversion_rate": conversion,
        }

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    async def get_config(self) -> AdminConfig:
        return await load_payment_config(self.configs)

    async def update_config(self, fields: dict) -> AdminConfig:
        changes = {k: v for k, v in fields.items() if k in CONFIG_FIELDS and v is not None}
        price = changes.get("price_usd")
        if price is not None and (not math.isfinite(price) or price <= 0):
            raise ValidationError("Invalid configuration", fields={"price_usd": "Price must be a positive number"})
        config = await self.configs.upsert(changes, config_defaults())
        logger.info("Admin %s updated config: %s", self.ctx.account_id, sorted(changes))
        return config

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def list_accounts(
        self, approved: Optional[bool] = None, paid: Optional[bool] = None
    ) -> List:
        return await self.accounts.list_accounts(approved=approved, paid=paid)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def create_listing(self, fields: dict) -> Listing:
        data = {k: v for k, v in fields.items() if k in LISTING_FIELDS and v is not None}
        listing = await self.listings.add(Listing(**data))
        logger.info("Listing %s created", listing.id)
        return listing

    async def update_listing(self, listing_id: str, fields: dict) -> Listing:
        changes = {
            k: v for k, v in fields.items()
            if k in LISTING_FIELDS and (v is not None or k in NULLABLE_LISTING_FIELDS)
        }
        listing = await self.listings.update(listing_id, changes)
        if listing is None:
            raise NotFound("Listing not found")
        return listing

    async def delete_listing(self, listing_id: str):
        # favorites pointing at it are left in place
        if not await self.listings.delete(listing_id):
            raise NotFound("Listing not found")
        logger.info("Listing %s deleted", listing_id)
