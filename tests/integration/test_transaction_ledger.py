"""
Integration tests for the deposit/withdrawal workflow.

Covers:
- Request validation and withdrawal escrow
- Approval and rejection effects on balances
- Idempotent settlement and terminal states
- History ordering and admin-only queries
"""

from decimal import Decimal

import pytest

from cloudminer.models.enums import TransactionStatus
from cloudminer.services.transaction import TransactionLedger
from cloudminer.utils.exceptions import (
    AccountBlocked,
    AccountNotFound,
    AlreadySettled,
    InsufficientFunds,
    InvalidAmount,
    TransactionNotFound,
    Unauthorized,
)


async def _primary(store, account_id: str) -> Decimal:
    async with store.read() as uow:
        return (await uow.accounts.require(account_id)).primary_balance


class TestRequests:
    """TransactionLedger.request."""

    @pytest.mark.asyncio
    async def test_deposit_request_is_pending_without_credit(self, accounts, ledger, store):
        """Deposits change nothing until approved."""
        account = await accounts.register("dep@example.com", "pw")

        tx = await ledger.deposit(account.id, "100", network="TRC20", proof="hash-1")

        assert tx.status == TransactionStatus.PENDING.value
        assert tx.is_pending is True
        assert tx.is_deposit is True
        assert tx.kind == "deposit"
        assert tx.amount == Decimal("100")
        assert tx.account_email == "dep@example.com"
        assert tx.network == "TRC20"
        assert tx.proof == "hash-1"
        assert tx.id.startswith("tx_")
        assert await _primary(store, account.id) == Decimal("0")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-5", "abc"])
    async def test_invalid_amount(self, accounts, ledger, amount):
        """Amounts must be positive numbers."""
        account = await accounts.register("bad@example.com", "pw")

        with pytest.raises(InvalidAmount):
            await ledger.deposit(account.id, amount)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0.000000001", "10000000000"])
    async def test_amount_must_fit_storage(self, accounts, ledger, amount):
        """Sub-unit and oversized amounts are refused, nothing is recorded."""
        account = await accounts.register("tiny@example.com", "pw")

        with pytest.raises(InvalidAmount):
            await ledger.deposit(account.id, amount)

        assert await ledger.history(account.id) == []

    @pytest.mark.asyncio
    async def test_smallest_unit_deposit_recorded_exactly(self, accounts, ledger):
        """One hundred-millionth is stored as is."""
        account = await accounts.register("unit@example.com", "pw")

        await ledger.deposit(account.id, "0.00000001")

        history = await ledger.history(account.id)
        assert history[0].amount == Decimal("0.00000001")
        assert history[0].amount > 0

    @pytest.mark.asyncio
    async def test_withdrawal_finer_than_storage(self, accounts, ledger, store, fund):
        """Escrow is never taken for an amount that would be rounded."""
        account = await accounts.register("fine@example.com", "pw")
        await fund(account.id, "10")

        with pytest.raises(InvalidAmount):
            await ledger.withdraw(account.id, "1.000000001")

        assert await _primary(store, account.id) == Decimal("10")

    @pytest.mark.asyncio
    async def test_unknown_account(self, ledger):
        """Requests need an existing account."""
        with pytest.raises(AccountNotFound):
            await ledger.deposit("uid9999", "10")

    @pytest.mark.asyncio
    async def test_withdrawal_escrows_immediately(self, accounts, ledger, store, fund):
        """Balance 50, withdraw 30: balance 20 and a pending request."""
        account = await accounts.register("wd@example.com", "pw")
        await fund(account.id, "50")

        tx = await ledger.withdraw(account.id, "30", network="TRC20", proof="TXyz")

        assert tx.status == "pending"
        assert await _primary(store, account.id) == Decimal("20")

    @pytest.mark.asyncio
    async def test_withdrawal_over_balance(self, accounts, ledger, store, fund):
        """Withdrawals cannot exceed the primary balance."""
        account = await accounts.register("poor@example.com", "pw")
        await fund(account.id, "10")

        with pytest.raises(InsufficientFunds):
            await ledger.withdraw(account.id, "10.01")

        assert await _primary(store, account.id) == Decimal("10")
        assert await ledger.history(account.id) == []

    @pytest.mark.asyncio
    async def test_minimum_withdrawal(self, accounts, store, fund):
        """A configured minimum applies to withdrawals only."""
        limited = TransactionLedger(store, min_withdrawal_amount=Decimal("2"))
        account = await accounts.register("min@example.com", "pw")
        await fund(account.id, "10")

        with pytest.raises(InvalidAmount):
            await limited.withdraw(account.id, "1")
        tx = await limited.deposit(account.id, "1")

        assert tx.amount == Decimal("1")

    @pytest.mark.asyncio
    async def test_blocked_account_cannot_request(self, accounts, admin, admin_service, ledger):
        """Blocked accounts cannot transact."""
        account = await accounts.register("blk@example.com", "pw")
        await admin_service.toggle_block(admin.id, account.id)

        with pytest.raises(AccountBlocked):
            await ledger.deposit(account.id, "10")


class TestSettlement:
    """TransactionLedger.settle."""

    @pytest.mark.asyncio
    async def test_approve_deposit_credits_and_pays_commission(
        self, accounts, admin, ledger, store
    ):
        """B deposits 100 under A: B +100, A +5 balance and earnings."""
        parent = await accounts.register("a@example.com", "pw")
        child = await accounts.register("b@example.com", "pw", parent.referral_code)
        tx = await ledger.deposit(child.id, "100")

        settled = await ledger.approve(admin.id, tx.id)

        assert settled.status == "approved"
        async with store.read() as uow:
            a = await uow.accounts.require(parent.id)
            b = await uow.accounts.require(child.id)
        assert b.primary_balance == Decimal("100")
        assert a.primary_balance == Decimal("5")
        assert a.referral_earnings == Decimal("5")

    @pytest.mark.asyncio
    async def test_double_approve_credits_once(self, accounts, admin, ledger, store):
        """Approving twice credits and pays commission exactly once."""
        parent = await accounts.register("p@example.com", "pw")
        child = await accounts.register("c@example.com", "pw", parent.referral_code)
        tx = await ledger.deposit(child.id, "100")

        await ledger.approve(admin.id, tx.id)
        again = await ledger.approve(admin.id, tx.id)

        assert again.status == "approved"
        assert await _primary(store, child.id) == Decimal("100")
        assert await _primary(store, parent.id) == Decimal("5")

    @pytest.mark.asyncio
    async def test_approve_withdrawal_keeps_escrow(self, accounts, admin, ledger, store, fund):
        """Approving a withdrawal has no further balance effect."""
        account = await accounts.register("out@example.com", "pw")
        await fund(account.id, "50")
        tx = await ledger.withdraw(account.id, "30")

        await ledger.approve(admin.id, tx.id)

        assert await _primary(store, account.id) == Decimal("20")

    @pytest.mark.asyncio
    async def test_reject_withdrawal_round_trip(self, accounts, admin, ledger, store, fund):
        """Rejecting restores the exact balance, repeat reject is a no-op."""
        account = await accounts.register("rt@example.com", "pw")
        await fund(account.id, "50")
        tx = await ledger.withdraw(account.id, "30")

        rejected = await ledger.reject(admin.id, tx.id)
        again = await ledger.reject(admin.id, tx.id)

        assert rejected.status == "rejected"
        assert again.status == "rejected"
        assert await _primary(store, account.id) == Decimal("50")

    @pytest.mark.asyncio
    async def test_reject_deposit_no_credit(self, accounts, admin, ledger, store):
        """Rejected deposits never credit."""
        account = await accounts.register("rd@example.com", "pw")
        tx = await ledger.deposit(account.id, "40")

        await ledger.reject(admin.id, tx.id)

        assert await _primary(store, account.id) == Decimal("0")

    @pytest.mark.asyncio
    async def test_terminal_state_is_final(self, accounts, admin, ledger, store):
        """An approved deposit cannot be rejected afterwards."""
        account = await accounts.register("fin@example.com", "pw")
        tx = await ledger.deposit(account.id, "40")
        await ledger.approve(admin.id, tx.id)

        with pytest.raises(AlreadySettled):
            await ledger.reject(admin.id, tx.id)

        assert await _primary(store, account.id) == Decimal("40")

    @pytest.mark.asyncio
    async def test_non_admin_cannot_settle(self, accounts, ledger):
        """Only the administrator settles."""
        account = await accounts.register("eve@example.com", "pw")
        tx = await ledger.deposit(account.id, "40")

        with pytest.raises(Unauthorized):
            await ledger.approve(account.id, tx.id)

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, admin, ledger):
        """Unknown ids are TransactionNotFound."""
        with pytest.raises(TransactionNotFound):
            await ledger.approve(admin.id, "tx_0_nope0")

    @pytest.mark.asyncio
    async def test_settle_after_owner_deleted(self, accounts, admin, admin_service, ledger):
        """Only the status changes when the owner is gone."""
        account = await accounts.register("gone@example.com", "pw")
        tx = await ledger.deposit(account.id, "40")
        await admin_service.delete_account(admin.id, account.id)

        settled = await ledger.approve(admin.id, tx.id)

        assert settled.status == "approved"

    @pytest.mark.asyncio
    async def test_deposit_without_referrer(self, accounts, admin, ledger, store):
        """No parent, no commission."""
        account = await accounts.register("solo@example.com", "pw")
        tx = await ledger.deposit(account.id, "100")

        await ledger.approve(admin.id, tx.id)

        assert await _primary(store, account.id) == Decimal("100")
        assert await _primary(store, admin.id) == Decimal("0")


class TestQueries:
    """History and approval queue."""

    @pytest.mark.asyncio
    async def test_history_newest_first(self, accounts, ledger, clock):
        """Own history is ordered newest first."""
        account = await accounts.register("hist@example.com", "pw")
        first = await ledger.deposit(account.id, "1")
        clock.advance(minutes=1)
        second = await ledger.deposit(account.id, "2")

        history = await ledger.history(account.id)

        assert [tx.id for tx in history] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_all_history_and_pending(self, accounts, admin, ledger, clock):
        """Admin sees every transaction and the pending queue."""
        one = await accounts.register("one@example.com", "pw")
        two = await accounts.register("two@example.com", "pw")
        tx1 = await ledger.deposit(one.id, "1")
        clock.advance(minutes=1)
        tx2 = await ledger.deposit(two.id, "2")
        await ledger.approve(admin.id, tx1.id)

        everything = await ledger.all_history(admin.id)
        queue = await ledger.pending(admin.id)

        assert [tx.id for tx in everything] == [tx2.id, tx1.id]
        assert [tx.id for tx in queue] == [tx2.id]

    @pytest.mark.asyncio
    async def test_all_history_admin_only(self, accounts, ledger):
        """Non-admins cannot list every transaction."""
        account = await accounts.register("nosy@example.com", "pw")

        with pytest.raises(Unauthorized):
            await ledger.all_history(account.id)
        with pytest.raises(Unauthorized):
            await ledger.pending(account.id)
