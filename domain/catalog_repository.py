from abc import ABCMeta, abstractmethod
from typing import List, Optional


class ListingRepository(metaclass=ABCMeta):

    @abstractmethod
    async def add(self, listing):
        pass

    @abstractmethod
    async def get(self, listing_id: str):
        pass

    @abstractmethod
    async def get_many(self, listing_ids: List[str]) -> List:
        pass

    @abstractmethod
    async def search(
        self,
        city: Optional[str] = None,
        max_budget: Optional[int] = None,
        sort_by: str = "newest",
        limit: int = 60,
    ) -> List:
        pass

    @abstractmethod
    async def update(self, listing_id: str, fields: dict):
        pass

    @abstractmethod
    async def delete(self, listing_id: str) -> bool:
        pass

    @abstractmethod
    async def count_active(self) -> int:
        pass


class ConfigRepository(metaclass=ABCMeta):
    """Singleton AdminConfig record."""

    @abstractmethod
    async def get_or_create(self, defaults: dict):
        pass

    @abstractmethod
    async def upsert(self, fields: dict, defaults: dict):
        pass
