"""Listing store reads: city/budget filter over active listings, with redaction."""

from __future__ import annotations

import logging
from typing import List, Optional

from config_env import SEARCH_LIMIT
from domain.access import full_access
from domain.catalog_repository import ListingRepository
from domain.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

CITIES = ("NY", "LA")
SORT_OPTIONS = ("newest", "price-low", "price-high")

# Withheld from callers without full access
REDACTED_FIELDS = ("address", "contact", "description")


def listing_view(listing, unlocked: bool) -> dict:
    data = {
        "id": listing.id,
        "city": listing.city,
        "title": listing.title,
        "area": listing.area,
        "price": listing.price,
        "beds": listing.beds,
        "baths": listing.baths,
        "sqft": listing.sqft,
        "type": listing.type,
        "address": listing.address,
        "image_url": listing.image_url,
        "description": listing.description,
        "amenities": list(listing.amenities or []),
        "contact": listing.contact,
        "is_active": listing.is_active,
        "created_at": listing.created_at,
        "is_redacted": not unlocked,
    }
    if not unlocked:
        for field in REDACTED_FIELDS:
            data[field] = None
    return data


class ListingService:
    def __init__(self, listings: ListingRepository):
        self.listings = listings

    async def search(
        self,
        viewer=None,
        city: Optional[str] = None,
        max_budget: Optional[int] = None,
        sort_by: str = "newest",
        limit: int = SEARCH_LIMIT,
    ) -> List[dict]:
        problems = {}
        if city and city not in CITIES:
            problems["city"] = "City must be NY or LA"
        if sort_by not in SORT_OPTIONS:
            problems["sort_by"] = "sort_by must be newest, price-low or price-high"
        if max_budget is not None and max_budget < 0:
            problems["max_budget"] = "Budget must not be negative"
        if problems:
            raise ValidationError("Invalid search", fields=problems)

        rows = await self.listings.search(
            city=city or None,
            max_budget=max_budget,
            sort_by=sort_by,
            limit=max(1, min(limit, SEARCH_LIMIT)),
        )
        unlocked = full_access(viewer)
        logger.debug("Search city=%s budget=%s -> %d listings", city, max_budget, len(rows))
        return [listing_view(l, unlocked) for l in rows]

    async def get(self, listing_id: str, viewer=None) -> dict:
        listing = await self.listings.get(listing_id)
        if listing is None:
            raise NotFound("Listing not found")
        return listing_view(listing, full_access(viewer))
