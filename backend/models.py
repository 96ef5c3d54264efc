"""
SQLAlchemy ORM models -- PostgreSQL / SQLite schema for SecretLease.

Tables
------
accounts        -- users and admins with approval/payment state
transactions    -- user-submitted payment attestations awaiting review
listings        -- rental catalog
admin_config    -- singleton: payment destinations + membership price
"""

from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from domain.access import Role, TransactionStatus

from .database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True, default=_new_id)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(10), nullable=False, default=Role.USER.value)
    is_approved = Column(Boolean, nullable=False, default=False)
    has_paid = Column(Boolean, nullable=False, default=False)

    # Payment attestation submitted with the signup
    payment_method = Column(String(10), nullable=True)
    payment_email = Column(String(320), nullable=True)
    wallet_address = Column(String(128), nullable=True)
    transaction_hash = Column(String(256), nullable=True)

    # Listing ids; not checked against the listings table
    favorites = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    transactions = relationship("Transaction", back_populates="account")

    __table_args__ = (
        Index("ix_accounts_role_approved", "role", "is_approved"),
    )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(32), primary_key=True, default=_new_id)
    # NULL once the owning account is rejected; user_email keeps the audit trail
    account_id = Column(
        String(32), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_email = Column(String(320), nullable=False)
    amount = Column(Float, nullable=False)
    method = Column(String(10), nullable=False)
    status = Column(String(10), nullable=False, default=TransactionStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    account = relationship("Account", back_populates="transactions")


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

class Listing(Base):
    __tablename__ = "listings"

    id = Column(String(32), primary_key=True, default=_new_id)
    city = Column(String(8), nullable=False, index=True)
    title = Column(String(256), nullable=False)
    area = Column(String(128), default="")
    price = Column(Integer, nullable=False, index=True)
    beds = Column(Integer, default=0)
    baths = Column(Integer, default=1)
    sqft = Column(Integer, default=0)
    type = Column(String(64), default="")
    address = Column(String(256), default="")
    image_url = Column(String(512), nullable=True)
    description = Column(Text, nullable=True)
    amenities = Column(JSON, nullable=False, default=list)
    contact = Column(String(320), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_listings_city_price", "city", "price"),
    )


# ---------------------------------------------------------------------------
# Admin configuration (singleton)
# ---------------------------------------------------------------------------

class AdminConfig(Base):
    __tablename__ = "admin_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    paypal_email = Column(String(320), nullable=False)
    btc_address = Column(String(128), nullable=False)
    usdt_address = Column(String(128), nullable=False)
    price_usd = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
