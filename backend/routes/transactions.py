"""Transaction endpoints -- payment proof submission and admin adjudication."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from backend.deps import get_session_context, get_workflow, require_admin
from backend.schemas import TransactionCreate, TransactionOut
from domain.access import SessionContext
from services.workflow_service import ApprovalWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionOut, status_code=201)
async def submit_payment(
    req: TransactionCreate,
    ctx: SessionContext = Depends(get_session_context),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    return await workflow.submit_payment(ctx.account_id, req.amount, req.method)


@router.get("", response_model=list[TransactionOut])
async def list_transactions(
    status: Optional[str] = None,
    ctx: SessionContext = Depends(get_session_context),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    """Admins see every transaction; users see their own."""
    return await workflow.list_transactions(ctx, status=status)


@router.put("/{transaction_id}/approve", response_model=TransactionOut)
async def approve_transaction(
    transaction_id: str,
    _admin: SessionContext = Depends(require_admin),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    return await workflow.approve_transaction(transaction_id)


@router.put("/{transaction_id}/reject", response_model=TransactionOut)
async def reject_transaction(
    transaction_id: str,
    _admin: SessionContext = Depends(require_admin),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    return await workflow.reject_transaction(transaction_id)
