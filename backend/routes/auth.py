"""Auth endpoints -- signup with payment attestation, login."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from backend.deps import get_account_service
from backend.schemas import AccountOut, AuthResponse, LoginRequest, RegisterRequest
from services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(req: RegisterRequest, accounts: AccountService = Depends(get_account_service)):
    """Create an unapproved account; access unlocks once an admin approves it."""
    account, token = await accounts.register(
        email=req.email,
        password=req.password,
        payment_method=req.payment_method,
        payment_email=req.payment_email,
        wallet_address=req.wallet_address,
        transaction_hash=req.transaction_hash,
    )
    return AuthResponse(token=token, user=AccountOut.model_validate(account))


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest, accounts: AccountService = Depends(get_account_service)):
    account, token = await accounts.login(req.email, req.password)
    return AuthResponse(token=token, user=AccountOut.model_validate(account))
