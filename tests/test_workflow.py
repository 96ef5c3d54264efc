"""
Approval workflow: transaction adjudication and signup review.

Coverage Focus Areas:
- Valid transitions and their side effects
- Invalid transition blocking (resolved transactions, approved accounts, admins)
- Atomicity of approve (status + has_paid in one commit)
- Concurrent approvals from separate sessions
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from data.sql_account_repository_impl import SQLAccountRepositoryImpl
from data.sql_transaction_repository_impl import SQLTransactionRepositoryImpl
from domain.access import AccessState, Role, SessionContext, full_access
from domain.errors import InvalidState, NotFound, ValidationError
from services.account_service import AccountService
from services.workflow_service import ApprovalWorkflow


@pytest.fixture
def workflow(repos):
    return ApprovalWorkflow(repos["accounts"], repos["transactions"])


@pytest.fixture
def accounts(repos):
    return AccountService(repos["accounts"], repos["listings"])


async def new_user(accounts, email="renter@mailbox.org", method="btc"):
    account, _ = await accounts.register(
        email=email,
        password="hunter22",
        payment_method=method,
        payment_email="payer@mailbox.org" if method == "paypal" else None,
        wallet_address=None if method == "paypal" else "bc1qwallet",
        transaction_hash="0xhash",
    )
    return account


async def reload(session_factory, account_id):
    async with session_factory() as s:
        return await SQLAccountRepositoryImpl(s).get(account_id)


class TestSubmitPayment:
    @pytest.mark.asyncio
    async def test_creates_pending_transaction_with_email_snapshot(self, workflow, accounts):
        account = await new_user(accounts)
        tx = await workflow.submit_payment(account.id, 60, "btc")
        assert tx.status == "pending"
        assert tx.user_email == "renter@mailbox.org"
        assert tx.amount == 60.0
        assert tx.resolved_at is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "amount,method,field",
        [
            (0, "btc", "amount"),
            (-5, "btc", "amount"),
            (float("nan"), "btc", "amount"),
            (float("inf"), "btc", "amount"),
            (60, "cash", "method"),
        ],
    )
    async def test_rejects_bad_input(self, workflow, accounts, amount, method, field):
        account = await new_user(accounts)
        with pytest.raises(ValidationError) as exc:
            await workflow.submit_payment(account.id, amount, method)
        assert field in exc.value.fields

    @pytest.mark.asyncio
    async def test_unknown_account(self, workflow):
        with pytest.raises(NotFound):
            await workflow.submit_payment("missing", 60, "btc")


class TestTransactionAdjudication:
    @pytest.mark.asyncio
    async def test_btc_happy_path(self, workflow, accounts, session_factory):
        """register -> submit -> approve tx -> approve signup gives full access"""
        account = await new_user(accounts)
        tx = await workflow.submit_payment(account.id, 60, "btc")

        approved = await workflow.approve_transaction(tx.id)
        assert approved.status == "completed"
        assert approved.resolved_at is not None
        paid = await reload(session_factory, account.id)
        assert paid.has_paid is True
        assert full_access(paid) is False

        await workflow.approve_signup(account.id)
        final = await reload(session_factory, account.id)
        assert final.is_approved is True
        assert full_access(final) is True

    @pytest.mark.asyncio
    async def test_paypal_reject_leaves_account_pending(self, workflow, accounts, session_factory):
        account = await new_user(accounts, method="paypal")
        tx = await workflow.submit_payment(account.id, 60, "paypal")

        rejected = await workflow.reject_transaction(tx.id)
        assert rejected.status == "rejected"

        after = await reload(session_factory, account.id)
        assert after.has_paid is False
        assert after.is_approved is False
        assert full_access(after) is False

    @pytest.mark.asyncio
    async def test_resolved_transaction_cannot_be_approved(self, workflow, accounts, session_factory):
        account = await new_user(accounts)
        tx = await workflow.submit_payment(account.id, 60, "btc")
        await workflow.reject_transaction(tx.id)

        with pytest.raises(InvalidState):
            await workflow.approve_transaction(tx.id)
        with pytest.raises(InvalidState):
            await workflow.reject_transaction(tx.id)

        after = await reload(session_factory, account.id)
        assert after.has_paid is False
        async with session_factory() as s:
            stored = await SQLTransactionRepositoryImpl(s).get(tx.id)
        assert stored.status == "rejected"

    @pytest.mark.asyncio
    async def test_completed_transaction_cannot_be_approved_twice(self, workflow, accounts):
        account = await new_user(accounts)
        tx = await workflow.submit_payment(account.id, 60, "btc")
        await workflow.approve_transaction(tx.id)
        with pytest.raises(InvalidState):
            await workflow.approve_transaction(tx.id)

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, workflow):
        with pytest.raises(NotFound):
            await workflow.approve_transaction("missing")
        with pytest.raises(NotFound):
            await workflow.reject_transaction("missing")

    @pytest.mark.asyncio
    async def test_failed_commit_leaves_both_records_untouched(
        self, workflow, accounts, session_factory, monkeypatch
    ):
        account = await new_user(accounts)
        tx = await workflow.submit_payment(account.id, 60, "btc")

        monkeypatch.setattr(AsyncSession, "commit", AsyncMock(side_effect=RuntimeError("disk full")))
        with pytest.raises(RuntimeError):
            await workflow.approve_transaction(tx.id)
        monkeypatch.undo()

        async with session_factory() as s:
            stored = await SQLTransactionRepositoryImpl(s).get(tx.id)
            owner = await SQLAccountRepositoryImpl(s).get(account.id)
        assert stored.status == "pending"
        assert owner.has_paid is False

    @pytest.mark.asyncio
    async def test_concurrent_approvals_succeed_once(self, workflow, accounts, session_factory):
        account = await new_user(accounts)
        tx = await workflow.submit_payment(account.id, 60, "btc")

        async def approve():
            async with session_factory() as s:
                wf = ApprovalWorkflow(SQLAccountRepositoryImpl(s), SQLTransactionRepositoryImpl(s))
                return await wf.approve_transaction(tx.id)

        results = await asyncio.gather(approve(), approve(), return_exceptions=True)
        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], InvalidState)


class TestListTransactions:
    @pytest.mark.asyncio
    async def test_users_see_only_their_own(self, workflow, accounts, admin_ctx):
        alice = await new_user(accounts, email="alice@mailbox.org")
        bob = await new_user(accounts, email="bob@mailbox.org")
        await workflow.submit_payment(alice.id, 60, "btc")
        await workflow.submit_payment(bob.id, 60, "btc")

        mine = await workflow.list_transactions(SessionContext(alice.id, Role.USER))
        assert [t.user_email for t in mine] == ["alice@mailbox.org"]

        everything = await workflow.list_transactions(admin_ctx)
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_status_filter(self, workflow, accounts, admin_ctx):
        account = await new_user(accounts)
        first = await workflow.submit_payment(account.id, 60, "btc")
        await workflow.submit_payment(account.id, 60, "btc")
        await workflow.approve_transaction(first.id)

        completed = await workflow.list_transactions(admin_ctx, status="completed")
        assert [t.id for t in completed] == [first.id]
        assert len(await workflow.list_transactions(admin_ctx, status="pending")) == 1

        with pytest.raises(ValidationError):
            await workflow.list_transactions(admin_ctx, status="refunded")


class TestSignupReview:
    @pytest.mark.asyncio
    async def test_approve_signup_marks_approved_and_paid(self, workflow, accounts):
        account = await new_user(accounts)
        assert account.is_approved is False
        assert account.has_paid is False

        approved = await workflow.approve_signup(account.id)
        assert approved.is_approved is True
        assert approved.has_paid is True
        assert full_access(approved) is True

    @pytest.mark.asyncio
    async def test_approve_signup_twice(self, workflow, accounts, session_factory):
        account = await new_user(accounts)
        await workflow.approve_signup(account.id)
        before = await reload(session_factory, account.id)

        with pytest.raises(InvalidState):
            await workflow.approve_signup(account.id)

        after = await reload(session_factory, account.id)
        assert (after.is_approved, after.has_paid, after.updated_at) == (
            before.is_approved, before.has_paid, before.updated_at
        )

    @pytest.mark.asyncio
    async def test_admin_is_not_reviewable(self, workflow, admin):
        with pytest.raises(InvalidState):
            await workflow.approve_signup(admin.id)
        with pytest.raises(InvalidState):
            await workflow.reject_signup(admin.id)

    @pytest.mark.asyncio
    async def test_unknown_account(self, workflow):
        with pytest.raises(NotFound):
            await workflow.approve_signup("missing")
        with pytest.raises(NotFound):
            await workflow.reject_signup("missing")

    @pytest.mark.asyncio
    async def test_reject_signup_deletes_account(self, workflow, accounts, repos):
        account = await new_user(accounts)
        assert await workflow.reject_signup(account.id) == AccessState.REJECTED

        assert await repos["accounts"].get(account.id) is None
        with pytest.raises(NotFound):
            await workflow.approve_signup(account.id)
        with pytest.raises(NotFound):
            await workflow.reject_signup(account.id)

    @pytest.mark.asyncio
    async def test_rejected_account_keeps_transaction_history(self, workflow, accounts, admin_ctx):
        account = await new_user(accounts)
        tx = await workflow.submit_payment(account.id, 60, "btc")
        await workflow.reject_signup(account.id)

        history = await workflow.list_transactions(admin_ctx)
        assert [t.id for t in history] == [tx.id]
        assert history[0].account_id is None
        assert history[0].user_email == "renter@mailbox.org"

        # still adjudicable, nobody to mark as paid
        completed = await workflow.approve_transaction(tx.id)
        assert completed.status == "completed"

    @pytest.mark.asyncio
    async def test_approved_account_cannot_be_rejected(self, workflow, accounts, repos):
        account = await new_user(accounts)
        await workflow.approve_signup(account.id)
        with pytest.raises(InvalidState):
            await workflow.reject_signup(account.id)
        assert await repos["accounts"].get(account.id) is not None

    @pytest.mark.asyncio
    async def test_pending_signups_lists_unapproved_users_only(self, workflow, accounts, admin):
        pending = await new_user(accounts, email="pending@mailbox.org")
        approved = await new_user(accounts, email="approved@mailbox.org")
        await workflow.approve_signup(approved.id)

        listed = await workflow.list_pending_signups()
        assert [a.id for a in listed] == [pending.id]
