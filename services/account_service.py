"""
Account & credential manager: signup with payment attestation, login,
session lookup and favorites.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from backend.models import Account
from backend.security import create_access_token, verify_password, hash_password
from config_env import MIN_PASSWORD_LENGTH, PAYMENT_METHODS
from domain.access import Role, SessionContext
from domain.account_repository import AccountRepository
from domain.catalog_repository import ListingRepository
from domain.errors import Conflict, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72

CRYPTO_METHODS = ("btc", "usdt")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_registration(
    email: str,
    password: str,
    payment_method: str,
    payment_email: Optional[str],
    wallet_address: Optional[str],
    transaction_hash: Optional[str],
) -> dict:
    """Return field -> problem for every invalid field (empty when valid)."""
    problems = {}
    if _blank(email) or "@" not in email:
        problems["email"] = "Please provide a valid email"
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        problems["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    elif len(password.encode()) > MAX_PASSWORD_BYTES:
        problems["password"] = f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
    if payment_method not in PAYMENT_METHODS:
        problems["payment_method"] = "Payment method must be paypal, btc, or usdt"
    elif payment_method == "paypal" and _blank(payment_email):
        problems["payment_email"] = "PayPal email is required for PayPal payments"
    elif payment_method in CRYPTO_METHODS and _blank(wallet_address):
        problems["wallet_address"] = "Wallet address is required for crypto payments"
    if _blank(transaction_hash):
        problems["transaction_hash"] = "Transaction hash is required"
    return problems


class AccountService:
    def __init__(self, accounts: AccountRepository, listings: Optional[ListingRepository] = None):
        self.accounts = accounts
        self.listings = listings

    async def register(
        self,
        email: str,
        password: str,
        payment_method: str,
        payment_email: Optional[str] = None,
        wallet_address: Optional[str] = None,
        transaction_hash: Optional[str] = None,
    ) -> Tuple[Account, str]:
        problems = validate_registration(
            email, password, payment_method, payment_email, wallet_address, transaction_hash
        )
        if problems:
            raise ValidationError("Invalid registration", fields=problems)

        email = email.strip().lower()
        if await self.accounts.find_by_email(email) is not None:
            raise Conflict("User already exists with this email", fields={"email": "already registered"})

        account = Account(
            email=email,
            password_hash=hash_password(password),
            role=Role.USER.value,
            is_approved=False,
            has_paid=False,
            payment_method=payment_method,
            # keep only the attestation that matches the method
            payment_email=payment_email.strip() if payment_method == "paypal" else None,
            wallet_address=wallet_address.strip() if payment_method in CRYPTO_METHODS else None,
            transaction_hash=transaction_hash.strip(),
            favorites=[],
        )
        account = await self.accounts.add(account)
        logger.info("Registered account %s (%s), awaiting approval", account.id, payment_method)
        return account, create_access_token(account.id, account.role)

    async def login(self, email: str, password: str) -> Tuple[Account, str]:
        account = await self.accounts.find_by_email(email or "")
        # Same error and same bcrypt cost whether or not the email exists
        if not verify_password(password or "", account.password_hash if account else None):
            logger.warning("Failed login attempt")
            raise Unauthorized("Invalid email or password")
        return account, create_access_token(account.id, account.role)

    async def current_account(self, ctx: SessionContext) -> Account:
        """Reload the session's account; a deleted account ends the session."""
        account = await self.accounts.get(ctx.account_id)
        if account is None:
            raise Unauthorized("Account no longer exists")
        return account

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def _write_favorites(self, account: Account, favorites: List[str]) -> List[str]:
        # Read-modify-write guarded by updated_at; a concurrent change to the
        # same account makes this write a Conflict instead of losing one update.
        saved = await self.accounts.set_favorites(account.id, favorites, seen_updated_at=account.updated_at)
        if saved is None:
            raise Conflict("Favorites changed concurrently, reload and retry")
        return saved

    async def add_favorite(self, ctx: SessionContext, listing_id: str) -> List[str]:
        account = await self.current_account(ctx)
        favorites = list(account.favorites or [])
        if listing_id in favorites:
            raise ValidationError("Listing already in favorites", fields={"listing_id": "duplicate"})
        favorites.append(listing_id)
        return await self._write_favorites(account, favorites)

    async def remove_favorite(self, ctx: SessionContext, listing_id: str) -> List[str]:
        account = await self.current_account(ctx)
        favorites = [f for f in (account.favorites or []) if f != listing_id]
        return await self._write_favorites(account, favorites)

    async def list_favorites(self, ctx: SessionContext) -> List:
        account = await self.current_account(ctx)
        # stale ids (deleted listings) are skipped
        return await self.listings.get_many(list(account.favorites or []))
