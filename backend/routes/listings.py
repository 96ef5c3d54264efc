"""Listing endpoints -- public search (redacted without full access) + admin CRUD."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.deps import get_admin_console, get_listing_service, get_viewer
from backend.schemas import (
    ListingCreate,
    ListingOut,
    ListingSearchResponse,
    ListingUpdate,
    MessageResponse,
)
from config_env import SEARCH_LIMIT
from domain.access import full_access
from services.admin_service import AdminConsole
from services.listing_service import ListingService, listing_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/listings", tags=["listings"])


@router.get("/search", response_model=ListingSearchResponse)
async def search_listings(
    city: Optional[str] = None,
    max_budget: Optional[int] = None,
    sort_by: str = "newest",
    limit: int = Query(default=SEARCH_LIMIT, ge=1),
    viewer=Depends(get_viewer),
    listings: ListingService = Depends(get_listing_service),
):
    results = await listings.search(
        viewer=viewer, city=city, max_budget=max_budget, sort_by=sort_by, limit=limit
    )
    return ListingSearchResponse(
        count=len(results),
        full_access=full_access(viewer),
        results=results,
    )


@router.get("/{listing_id}", response_model=ListingOut)
async def get_listing(
    listing_id: str,
    viewer=Depends(get_viewer),
    listings: ListingService = Depends(get_listing_service),
):
    return await listings.get(listing_id, viewer=viewer)


@router.post("", response_model=ListingOut, status_code=201)
async def create_listing(req: ListingCreate, console: AdminConsole = Depends(get_admin_console)):
    listing = await console.create_listing(req.model_dump())
    return listing_view(listing, unlocked=True)


@router.put("/{listing_id}", response_model=ListingOut)
async def update_listing(
    listing_id: str,
    req: ListingUpdate,
    console: AdminConsole = Depends(get_admin_console),
):
    listing = await console.update_listing(listing_id, req.model_dump(exclude_unset=True))
    return listing_view(listing, unlocked=True)


@router.delete("/{listing_id}", response_model=MessageResponse)
async def delete_listing(listing_id: str, console: AdminConsole = Depends(get_admin_console)):
    await console.delete_listing(listing_id)
    return MessageResponse(message="Listing deleted successfully")
