"""
Access rules: roles, account/transaction states, the full-access predicate
and the screen selector used by clients.

Everything here is pure; the functions accept any object exposing
``role``, ``is_approved`` and ``has_paid`` (ORM Account or schema).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class AccessState(str, Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    # Rejected accounts are deleted; the value only shows up in logs/responses
    REJECTED = "rejected"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class Screen(str, Enum):
    LANDING = "landing"
    SEARCHING = "searching"
    RESULTS = "results"
    AUTH = "auth"
    PAYMENT = "payment"
    SUCCESS = "success"
    PENDING_APPROVAL = "pending_approval"
    ADMIN = "admin"


PUBLIC_SCREENS = frozenset({Screen.LANDING, Screen.SEARCHING, Screen.RESULTS, Screen.AUTH})
PAYMENT_SCREENS = frozenset({Screen.PAYMENT, Screen.SUCCESS})


def is_admin(account: Any) -> bool:
    return getattr(account, "role", None) in (Role.ADMIN, Role.ADMIN.value)


def full_access(account: Any) -> bool:
    """Whether listing details may be shown unredacted."""
    if account is None:
        return False
    if is_admin(account):
        return True
    return bool(account.is_approved) and bool(account.has_paid)


def access_state(account: Any) -> AccessState:
    if is_admin(account) or account.is_approved:
        return AccessState.APPROVED
    return AccessState.PENDING_APPROVAL


@dataclass(frozen=True)
class SessionContext:
    """Identity carried by a verified bearer token."""

    account_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class SessionState:
    account: Optional[Any] = None
    requested: Optional[Screen] = None
    has_results: bool = False


def current_screen(state: SessionState) -> Screen:
    requested = state.requested
    account = state.account

    if account is None:
        if requested in PUBLIC_SCREENS:
            return requested
        return Screen.AUTH

    if is_admin(account):
        if requested in PUBLIC_SCREENS and requested != Screen.AUTH:
            return requested
        return Screen.ADMIN

    if not full_access(account):
        if requested in PAYMENT_SCREENS:
            return requested
        return Screen.PENDING_APPROVAL

    if requested is not None and requested not in (Screen.ADMIN, Screen.AUTH, Screen.PENDING_APPROVAL):
        return requested
    return Screen.RESULTS if state.has_results else Screen.LANDING
