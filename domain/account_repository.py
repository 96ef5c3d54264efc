from abc import ABCMeta, abstractmethod
from typing import List, Optional


class AccountRepository(metaclass=ABCMeta):
    """Credential store: Account records with approval/payment state."""

    @abstractmethod
    async def add(self, account):
        """Persist a new account; raises Conflict if the email is taken."""

    @abstractmethod
    async def get(self, account_id: str):
        pass

    @abstractmethod
    async def find_by_email(self, email: str):
        pass

    @abstractmethod
    async def list_accounts(
        self,
        role: Optional[str] = None,
        approved: Optional[bool] = None,
        paid: Optional[bool] = None,
    ) -> List:
        """Newest first."""

    @abstractmethod
    async def approve_pending(self, account_id: str) -> bool:
        """Atomically set is_approved + has_paid on a pending user.

        Returns False when no pending user account matched.
        """

    @abstractmethod
    async def delete_pending(self, account_id: str) -> bool:
        """Atomically detach transactions and delete a pending user."""

    @abstractmethod
    async def set_favorites(self, account_id: str, favorites: List[str], seen_updated_at=None):
        """Replace the favorites list.

        With ``seen_updated_at`` the write only applies if the account is
        unchanged since that read; returns None otherwise.
        """

    @abstractmethod
    async def count(self, approved: Optional[bool] = None, role: Optional[str] = None) -> int:
        pass

    @abstractmethod
    async def count_paid(self) -> int:
        """Accounts with has_paid or role admin."""
