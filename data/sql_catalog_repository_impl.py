import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models import AdminConfig, Listing
from domain.catalog_repository import ConfigRepository, ListingRepository

logger = logging.getLogger(__name__)

SINGLETON_ID = 1

SORT_ORDERS = {
    "newest": (Listing.created_at.desc(),),
    "price-low": (Listing.price.asc(), Listing.created_at.desc()),
    "price-high": (Listing.price.desc(), Listing.created_at.desc()),
}


class SQLListingRepositoryImpl(ListingRepository):
    def __init__(self, session: AsyncSession):
        super().__init__()
        self.session = session

    async def _commit(self):
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def add(self, listing):
        self.session.add(listing)
        await self._commit()
        return listing

    async def get(self, listing_id: str):
        return await self.session.get(Listing, listing_id, populate_existing=True)

    async def get_many(self, listing_ids: List[str]) -> List:
        if not listing_ids:
            return []
        stmt = select(Listing).where(Listing.id.in_(listing_ids))
        found = {l.id: l for l in (await self.session.execute(stmt)).scalars().all()}
        # keep the caller's order, drop ids that no longer exist
        return [found[i] for i in listing_ids if i in found]

    async def search(
        self,
        city: Optional[str] = None,
        max_budget: Optional[int] = None,
        sort_by: str = "newest",
        limit: int = 60,
    ) -> List:
        stmt = select(Listing).where(Listing.is_active.is_(True))
        if city:
            stmt = stmt.where(Listing.city == city)
        if max_budget is not None:
            stmt = stmt.where(Listing.price <= max_budget)
        stmt = stmt.order_by(*SORT_ORDERS.get(sort_by, SORT_ORDERS["newest"])).limit(limit)
        return list((await self.session.execute(stmt)).scalars().all())

    async def update(self, listing_id: str, fields: dict):
        listing = await self.get(listing_id)
        if listing is None:
            return None
        for key, value in fields.items():
            setattr(listing, key, value)
        await self._commit()
        return listing

    async def delete(self, listing_id: str) -> bool:
        try:
            result = await self.session.execute(delete(Listing).where(Listing.id == listing_id))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return result.rowcount == 1

    async def count_active(self) -> int:
        stmt = select(func.count(Listing.id)).where(Listing.is_active.is_(True))
        return (await self.session.execute(stmt)).scalar() or 0


class SQLConfigRepositoryImpl(ConfigRepository):
    """The singleton row always has id 1, so concurrent creates collide on the key."""

    def __init__(self, session: AsyncSession):
        super().__init__()
        self.session = session

    async def _load(self):
        return await self.session.get(AdminConfig, SINGLETON_ID, populate_existing=True)

    async def get_or_create(self, defaults: dict):
        config = await self._load()
        if config is not None:
            return config

        self.session.add(AdminConfig(id=SINGLETON_ID, **defaults))
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info("Admin config created concurrently; reloading")
        return await self._load()

    async def upsert(self, fields: dict, defaults: dict):
        config = await self.get_or_create(defaults)
        for key, value in fields.items():
            setattr(config, key, value)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return config
