import logging
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models import Account, Transaction, utcnow
from domain.access import TransactionStatus
from domain.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)


class SQLTransactionRepositoryImpl(TransactionRepository):
    def __init__(self, session: AsyncSession):
        super().__init__()
        self.session = session

    async def add(self, transaction):
        self.session.add(transaction)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return transaction

    async def get(self, transaction_id: str):
        return await self.session.get(Transaction, transaction_id, populate_existing=True)

    async def list_transactions(
        self,
        account_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List:
        stmt = select(Transaction).execution_options(populate_existing=True)
        if account_id is not None:
            stmt = stmt.where(Transaction.account_id == account_id)
        if status is not None:
            stmt = stmt.where(Transaction.status == status)
        stmt = stmt.order_by(Transaction.created_at.desc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def _resolve(self, transaction_id: str, status: TransactionStatus):
        # The status check and the write are one statement; a concurrent
        # resolver blocks on the row and then matches nothing.
        stmt = (
            update(Transaction)
            .where(
                Transaction.id == transaction_id,
                Transaction.status == TransactionStatus.PENDING.value,
            )
            .values(status=status.value, resolved_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return await self.session.execute(stmt)

    async def complete_pending(self, transaction_id: str) -> bool:
        try:
            result = await self._resolve(transaction_id, TransactionStatus.COMPLETED)
            if result.rowcount != 1:
                await self.session.rollback()
                return False

            account_id = (
                await self.session.execute(
                    select(Transaction.account_id).where(Transaction.id == transaction_id)
                )
            ).scalar()
            if account_id is not None:
                await self.session.execute(
                    update(Account)
                    .where(Account.id == account_id)
                    .values(has_paid=True, updated_at=utcnow())
                    .execution_options(synchronize_session=False)
                )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return True

    async def reject_pending(self, transaction_id: str) -> bool:
        try:
            result = await self._resolve(transaction_id, TransactionStatus.REJECTED)
            if result.rowcount != 1:
                await self.session.rollback()
                return False
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return True

    async def count(self, status: Optional[str] = None) -> int:
        stmt = select(func.count(Transaction.id))
        if status is not None:
            stmt = stmt.where(Transaction.status == status)
        return (await self.session.execute(stmt)).scalar() or 0

    async def revenue(self) -> float:
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.status == TransactionStatus.COMPLETED.value
        )
        return float((await self.session.execute(stmt)).scalar() or 0)
