"""Public payment configuration, shown during signup and payment."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.database import get_session
from backend.schemas import PaymentConfig
from data.sql_catalog_repository_impl import SQLConfigRepositoryImpl
from services.admin_service import load_payment_config

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/payment", response_model=PaymentConfig)
async def payment_config(session: AsyncSession = Depends(get_session)):
    return await load_payment_config(SQLConfigRepositoryImpl(session))
