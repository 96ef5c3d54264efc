"""
FastAPI dependencies: per-request session context and service wiring.

The bearer token is the only source of identity; handlers receive an
explicit SessionContext instead of reading any client-side state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from backend.database import get_session
from backend.security import bearer_token, decode_access_token
from data.sql_account_repository_impl import SQLAccountRepositoryImpl
from data.sql_catalog_repository_impl import SQLConfigRepositoryImpl, SQLListingRepositoryImpl
from data.sql_transaction_repository_impl import SQLTransactionRepositoryImpl
from domain.access import SessionContext
from domain.errors import Forbidden, Unauthorized
from services.account_service import AccountService
from services.admin_service import AdminConsole
from services.listing_service import ListingService
from services.workflow_service import ApprovalWorkflow


async def get_session_context(authorization: Optional[str] = Header(default=None)) -> SessionContext:
    token = bearer_token(authorization)
    if not token:
        raise Unauthorized("Not authenticated")
    return decode_access_token(token)


async def get_optional_context(
    authorization: Optional[str] = Header(default=None),
) -> Optional[SessionContext]:
    token = bearer_token(authorization)
    if not token:
        return None
    try:
        return decode_access_token(token)
    except Unauthorized:
        # an expired token on a public route just means anonymous
        return None


async def require_admin(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_admin:
        raise Forbidden("Admin access required")
    return ctx


def get_account_service(session: AsyncSession = Depends(get_session)) -> AccountService:
    return AccountService(SQLAccountRepositoryImpl(session), SQLListingRepositoryImpl(session))


def get_workflow(session: AsyncSession = Depends(get_session)) -> ApprovalWorkflow:
    return ApprovalWorkflow(SQLAccountRepositoryImpl(session), SQLTransactionRepositoryImpl(session))


def get_listing_service(session: AsyncSession = Depends(get_session)) -> ListingService:
    return ListingService(SQLListingRepositoryImpl(session))


def get_admin_console(
    ctx: SessionContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> AdminConsole:
    return AdminConsole(
        ctx,
        SQLAccountRepositoryImpl(session),
        SQLTransactionRepositoryImpl(session),
        SQLListingRepositoryImpl(session),
        SQLConfigRepositoryImpl(session),
    )


async def get_viewer(
    ctx: Optional[SessionContext] = Depends(get_optional_context),
    session: AsyncSession = Depends(get_session),
):
    """Account behind an optional token (None for anonymous or stale sessions)."""
    if ctx is None:
        return None
    return await SQLAccountRepositoryImpl(session).get(ctx.account_id)
