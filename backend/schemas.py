"""Pydantic schemas for FastAPI request / response models."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, computed_field

from domain.access import full_access as _full_access


# ---------------------------------------------------------------------------
# Accounts / auth
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    payment_method: str
    payment_email: Optional[str] = None
    wallet_address: Optional[str] = None
    transaction_hash: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class AccountOut(BaseModel):
    id: str
    email: str
    role: str
    is_approved: bool = False
    has_paid: bool = False
    favorites: list[str] = []
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def full_access(self) -> bool:
        return _full_access(self)


class AccountAdminView(AccountOut):
    """Includes the payment attestation submitted at signup."""

    payment_method: Optional[str] = None
    payment_email: Optional[str] = None
    wallet_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    updated_at: Optional[dt.datetime] = None


class AuthResponse(BaseModel):
    token: str
    user: AccountOut


class SessionResponse(BaseModel):
    user: AccountOut
    access_state: str
    screen: str


class PendingSignup(BaseModel):
    id: str
    email: str
    payment_method: Optional[str] = None
    payment_email: Optional[str] = None
    wallet_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class FavoritesResponse(BaseModel):
    favorites: list[str]


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class TransactionCreate(BaseModel):
    amount: float = Field(gt=0, allow_inf_nan=False)
    method: str


class TransactionOut(BaseModel):
    id: str
    account_id: Optional[str] = None
    user_email: str
    amount: float
    method: str
    status: str
    created_at: Optional[dt.datetime] = None
    resolved_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

class ListingOut(BaseModel):
    id: str
    city: str
    title: str
    area: str = ""
    price: int
    beds: int = 0
    baths: int = 1
    sqft: int = 0
    type: str = ""
    address: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    amenities: list[str] = []
    contact: Optional[str] = None
    is_active: bool = True
    created_at: Optional[dt.datetime] = None
    is_redacted: bool = False


class ListingCreate(BaseModel):
    city: str = Field(pattern="^(NY|LA)$")
    title: str = Field(min_length=1, max_length=256)
    area: str = ""
    price: int = Field(ge=0)
    beds: int = Field(default=0, ge=0)
    baths: int = Field(default=1, ge=0)
    sqft: int = Field(default=0, ge=0)
    type: str = ""
    address: str = ""
    image_url: Optional[str] = None
    description: Optional[str] = None
    amenities: list[str] = []
    contact: Optional[str] = None
    is_active: bool = True


class ListingUpdate(BaseModel):
    city: Optional[str] = Field(default=None, pattern="^(NY|LA)$")
    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    area: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    beds: Optional[int] = Field(default=None, ge=0)
    baths: Optional[int] = Field(default=None, ge=0)
    sqft: Optional[int] = Field(default=None, ge=0)
    type: Optional[str] = None
    address: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    amenities: Optional[list[str]] = None
    contact: Optional[str] = None
    is_active: Optional[bool] = None


class ListingSearchResponse(BaseModel):
    count: int
    full_access: bool
    results: list[ListingOut]


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

class PaymentConfig(BaseModel):
    paypal_email: str
    btc_address: str
    usdt_address: str
    price_usd: float

    class Config:
        from_attributes = True


class PaymentConfigUpdate(BaseModel):
    paypal_email: Optional[str] = None
    btc_address: Optional[str] = None
    usdt_address: Optional[str] = None
    price_usd: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)


class AdminStats(BaseModel):
    total_users: int = 0
    paid_users: int = 0
    pending_signups: int = 0
    total_listings: int = 0
    pending_transactions: int = 0
    completed_transactions: int = 0
    total_revenue: float = 0
    conversion_rate: int = 0


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str
    code: str
    fields: dict = Field(default_factory=dict)
    error: Optional[str] = None
