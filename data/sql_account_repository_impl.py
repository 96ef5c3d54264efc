import logging
from typing import List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models import Account, Transaction, utcnow
from domain.access import Role
from domain.account_repository import AccountRepository
from domain.errors import Conflict

logger = logging.getLogger(__name__)


class SQLAccountRepositoryImpl(AccountRepository):
    def __init__(self, session: AsyncSession):
        super().__init__()
        self.session = session

    async def add(self, account):
        self.session.add(account)
        try:
            await self.session.commit()
        except IntegrityError:
            # unique index on email lost a race with a concurrent signup
            await self.session.rollback()
            raise Conflict("User already exists with this email", fields={"email": "already registered"})
        return account

    async def get(self, account_id: str):
        return await self.session.get(Account, account_id, populate_existing=True)

    async def find_by_email(self, email: str):
        stmt = (
            select(Account)
            .where(Account.email == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def list_accounts(
        self,
        role: Optional[str] = None,
        approved: Optional[bool] = None,
        paid: Optional[bool] = None,
    ) -> List:
        stmt = select(Account).execution_options(populate_existing=True)
        if role is not None:
            stmt = stmt.where(Account.role == role)
        if approved is not None:
            stmt = stmt.where(Account.is_approved.is_(approved))
        if paid is not None:
            stmt = stmt.where(Account.has_paid.is_(paid))
        stmt = stmt.order_by(Account.created_at.desc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def approve_pending(self, account_id: str) -> bool:
        stmt = (
            update(Account)
            .where(
                Account.id == account_id,
                Account.role == Role.USER.value,
                Account.is_approved.is_(False),
            )
            .values(is_approved=True, has_paid=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return result.rowcount == 1

    async def delete_pending(self, account_id: str) -> bool:
        detach = (
            update(Transaction)
            .where(Transaction.account_id == account_id)
            .values(account_id=None)
            .execution_options(synchronize_session=False)
        )
        remove = (
            delete(Account)
            .where(
                Account.id == account_id,
                Account.role == Role.USER.value,
                Account.is_approved.is_(False),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            await self.session.execute(detach)
            result = await self.session.execute(remove)
            if result.rowcount != 1:
                # not a pending user: undo the detach
                await self.session.rollback()
                return False
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return True

    async def set_favorites(self, account_id: str, favorites: List[str], seen_updated_at=None):
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(favorites=list(favorites), updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if seen_updated_at is not None:
            # compare-and-swap: a write since the caller's read matches nothing
            stmt = stmt.where(Account.updated_at == seen_updated_at)
        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                await self.session.rollback()
                return None
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return list(favorites)

    async def count(self, approved: Optional[bool] = None, role: Optional[str] = None) -> int:
        stmt = select(func.count(Account.id))
        if approved is not None:
            stmt = stmt.where(Account.is_approved.is_(approved))
        if role is not None:
            stmt = stmt.where(Account.role == role)
        return (await self.session.execute(stmt)).scalar() or 0

    async def count_paid(self) -> int:
        stmt = select(func.count(Account.id)).where(
            or_(Account.has_paid.is_(True), Account.role == Role.ADMIN.value)
        )
        return (await self.session.execute(stmt)).scalar() or 0
