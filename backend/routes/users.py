"""Current-user endpoints -- profile/access state and favorites."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.deps import get_account_service, get_session_context
from backend.schemas import AccountOut, FavoritesResponse, ListingOut, SessionResponse
from domain.access import (
    Screen,
    SessionContext,
    SessionState,
    access_state,
    current_screen,
    full_access,
)
from domain.errors import ValidationError
from services.account_service import AccountService
from services.listing_service import listing_view

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=SessionResponse)
async def me(
    screen: Optional[str] = Query(default=None, description="Screen the client wants to show"),
    has_results: bool = False,
    ctx: SessionContext = Depends(get_session_context),
    accounts: AccountService = Depends(get_account_service),
):
    """Re-derive role and access from the stored account on every reload."""
    try:
        requested = Screen(screen) if screen else None
    except ValueError:
        raise ValidationError("Unknown screen", fields={"screen": screen})

    account = await accounts.current_account(ctx)
    state = SessionState(account=account, requested=requested, has_results=has_results)
    return SessionResponse(
        user=AccountOut.model_validate(account),
        access_state=access_state(account).value,
        screen=current_screen(state).value,
    )


@router.get("/favorites", response_model=list[ListingOut])
async def list_favorites(
    ctx: SessionContext = Depends(get_session_context),
    accounts: AccountService = Depends(get_account_service),
):
    account = await accounts.current_account(ctx)
    listings = await accounts.list_favorites(ctx)
    unlocked = full_access(account)
    return [listing_view(l, unlocked) for l in listings]


@router.post("/favorites/{listing_id}", response_model=FavoritesResponse)
async def add_favorite(
    listing_id: str,
    ctx: SessionContext = Depends(get_session_context),
    accounts: AccountService = Depends(get_account_service),
):
    return FavoritesResponse(favorites=await accounts.add_favorite(ctx, listing_id))


@router.delete("/favorites/{listing_id}", response_model=FavoritesResponse)
async def remove_favorite(
    listing_id: str,
    ctx: SessionContext = Depends(get_session_context),
    accounts: AccountService = Depends(get_account_service),
):
    return FavoritesResponse(favorites=await accounts.remove_favorite(ctx, listing_id))
