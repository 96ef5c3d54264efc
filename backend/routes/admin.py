"""Admin endpoints -- dashboard stats, payment config, accounts, signup review."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from backend.deps import get_admin_console, get_workflow
from backend.schemas import (
    AccountAdminView,
    AdminStats,
    MessageResponse,
    PaymentConfig,
    PaymentConfigUpdate,
    PendingSignup,
)
from services.admin_service import AdminConsole
from services.workflow_service import ApprovalWorkflow

logger = logging.getLogger(__name__)

# Every route goes through get_admin_console, which rejects non-admin tokens
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
async def system_stats(console: AdminConsole = Depends(get_admin_console)):
    return AdminStats(**await console.stats())


@router.get("/config", response_model=PaymentConfig)
async def get_config(console: AdminConsole = Depends(get_admin_console)):
    return await console.get_config()


@router.put("/config", response_model=PaymentConfig)
async def update_config(
    req: PaymentConfigUpdate,
    console: AdminConsole = Depends(get_admin_console),
):
    return await console.update_config(req.model_dump(exclude_unset=True))


@router.get("/users", response_model=list[AccountAdminView])
async def list_users(
    approved: Optional[bool] = None,
    paid: Optional[bool] = None,
    console: AdminConsole = Depends(get_admin_console),
):
    return await console.list_accounts(approved=approved, paid=paid)


@router.get("/pending-signups", response_model=list[PendingSignup])
async def pending_signups(
    console: AdminConsole = Depends(get_admin_console),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    """Unapproved user accounts, newest first."""
    return await workflow.list_pending_signups()


@router.post("/approve-user/{account_id}", response_model=AccountAdminView)
async def approve_user(
    account_id: str,
    console: AdminConsole = Depends(get_admin_console),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    return await workflow.approve_signup(account_id)


@router.post("/reject-user/{account_id}", response_model=MessageResponse)
async def reject_user(
    account_id: str,
    console: AdminConsole = Depends(get_admin_console),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    await workflow.reject_signup(account_id)
    return MessageResponse(message="User signup rejected and removed")
