"""
Approval / access-state workflow.

Two small state machines:

    account:      pending_approval --approve_signup--> approved
                  pending_approval --reject_signup---> rejected (record deleted)
    transaction:  pending --approve--> completed  (owner.has_paid = true, same commit)
                  pending --reject---> rejected

Admin accounts never enter the account machine; they are always approved.
Every transition is a conditional write in the store, so a second caller
racing the first sees InvalidState instead of re-applying it.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from backend.models import Account, Transaction
from config_env import PAYMENT_METHODS
from domain.access import AccessState, Role, SessionContext, TransactionStatus, is_admin
from domain.account_repository import AccountRepository
from domain.errors import InvalidState, NotFound, ValidationError
from domain.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)


class ApprovalWorkflow:
    def __init__(self, accounts: AccountRepository, transactions: TransactionRepository):
        self.accounts = accounts
        self.transactions = transactions

    async def _account_or_404(self, account_id: str) -> Account:
        account = await self.accounts.get(account_id)
        if account is None:
            raise NotFound("User not found")
        return account

    async def _transaction_or_404(self, transaction_id: str) -> Transaction:
        tx = await self.transactions.get(transaction_id)
        if tx is None:
            raise NotFound("Transaction not found")
        return tx

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def submit_payment(self, account_id: str, amount: float, method: str) -> Transaction:
        problems = {}
        if amount is None or not math.isfinite(amount) or amount <= 0:
            problems["amount"] = "Amount must be a positive number"
        if method not in PAYMENT_METHODS:
            problems["method"] = "Payment method must be paypal, btc, or usdt"
        if problems:
            raise ValidationError("Invalid payment", fields=problems)

        account = await self._account_or_404(account_id)
        tx = Transaction(
            account_id=account.id,
            # snapshot for audit; survives email changes and account removal
            user_email=account.email,
            amount=float(amount),
            method=method,
            status=TransactionStatus.PENDING.value,
        )
        tx = await self.transactions.add(tx)
        logger.info("Payment %s submitted by %s: %.2f via %s", tx.id, account.id, tx.amount, method)
        return tx

    async def approve_transaction(self, transaction_id: str) -> Transaction:
        if not await self.transactions.complete_pending(transaction_id):
            await self._transaction_or_404(transaction_id)
            raise InvalidState("Transaction is not pending")
        tx = await self._transaction_or_404(transaction_id)
        logger.info("Transaction %s approved; account %s marked paid", tx.id, tx.account_id)
        return tx

    async def reject_transaction(self, transaction_id: str) -> Transaction:
        if not await self.transactions.reject_pending(transaction_id):
            await self._transaction_or_404(transaction_id)
            raise InvalidState("Transaction is not pending")
        tx = await self._transaction_or_404(transaction_id)
        logger.info("Transaction %s rejected", tx.id)
        return tx

    async def list_transactions(
        self, ctx: SessionContext, status: Optional[str] = None
    ) -> List[Transaction]:
        if status is not None and status not in {s.value for s in TransactionStatus}:
            raise ValidationError("Invalid status filter", fields={"status": "unknown status"})
        # users only ever see their own
        account_id = None if ctx.is_admin else ctx.account_id
        return await self.transactions.list_transactions(account_id=account_id, status=status)

    # ------------------------------------------------------------------
    # Signups
    # ------------------------------------------------------------------

    async def approve_signup(self, account_id: str) -> Account:
        if not await self.accounts.approve_pending(account_id):
            account = await self._account_or_404(account_id)
            if is_admin(account):
                raise InvalidState("Admin accounts do not require approval")
            raise InvalidState("User is already approved")
        account = await self._account_or_404(account_id)
        logger.info("Signup %s approved (%s)", account.id, account.email)
        return account

    async def reject_signup(self, account_id: str) -> AccessState:
        """Delete a pending signup. Sessions of the deleted account stop resolving."""
        if not await self.accounts.delete_pending(account_id):
            account = await self._account_or_404(account_id)
            if is_admin(account):
                raise InvalidState("Admin accounts cannot be rejected")
            raise InvalidState("User is already approved")
        logger.info("Signup %s rejected and removed", account_id)
        return AccessState.REJECTED

    async def list_pending_signups(self) -> List[Account]:
        return await self.accounts.list_accounts(role=Role.USER.value, approved=False)
