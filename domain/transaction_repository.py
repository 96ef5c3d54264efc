from abc import ABCMeta, abstractmethod
from typing import List, Optional


class TransactionRepository(metaclass=ABCMeta):
    """Transaction store with the atomic dual-write on completion."""

    @abstractmethod
    async def add(self, transaction):
        pass

    @abstractmethod
    async def get(self, transaction_id: str):
        pass

    @abstractmethod
    async def list_transactions(
        self,
        account_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List:
        """Newest first."""

    @abstractmethod
    async def complete_pending(self, transaction_id: str) -> bool:
        """Mark a pending transaction completed and its owner paid in one commit.

        Returns False when the transaction is missing or no longer pending.
        """

    @abstractmethod
    async def reject_pending(self, transaction_id: str) -> bool:
        pass

    @abstractmethod
    async def count(self, status: Optional[str] = None) -> int:
        pass

    @abstractmethod
    async def revenue(self) -> float:
        """Sum of amounts over completed transactions."""
