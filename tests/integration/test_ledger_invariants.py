"""
Integration tests for ledger-wide invariants.

Covers:
- referral_count equals the number of children after every operation
- Balances never go negative through user operations
- Concurrent settlement of the same transaction applies once
- Failed units of work leave no partial state
"""

import asyncio
from decimal import Decimal

import pytest

from cloudminer.models.account import Account
from cloudminer.utils.exceptions import InsufficientFunds


async def _assert_counts_consistent(store) -> None:
    async with store.read() as uow:
        for account in await uow.accounts.list_all():
            assert account.referral_count == await uow.accounts.count_referrals(account.id)


async def _assert_non_negative(store) -> None:
    async with store.read() as uow:
        for account in await uow.accounts.list_all():
            assert account.primary_balance >= 0
            assert account.secondary_balance >= 0


class TestReferralCountInvariant:
    """Counters always match the children."""

    @pytest.mark.asyncio
    async def test_counts_through_lifecycle(self, accounts, admin, admin_service, store):
        """Register, relink and delete keep counts in step."""
        a = await accounts.register("a@example.com", "pw")
        b = await accounts.register("b@example.com", "pw", a.referral_code)
        c = await accounts.register("c@example.com", "pw", a.referral_code)
        d = await accounts.register("d@example.com", "pw", b.referral_code)
        await _assert_counts_consistent(store)

        await admin_service.relink_referrer(admin.id, c.id, b.referral_code)
        await _assert_counts_consistent(store)

        await admin_service.relink_referrer(admin.id, d.id, admin.referral_code)
        await _assert_counts_consistent(store)

        await admin_service.delete_account(admin.id, c.id)
        await _assert_counts_consistent(store)


class TestNonNegativeBalances:
    """User operations never overdraw."""

    @pytest.mark.asyncio
    async def test_refused_operations_leave_balances_intact(
        self, accounts, ledger, yield_engine, fund, store
    ):
        """Overdrafts are refused, not clamped."""
        user = await accounts.register("user@example.com", "pw")
        await fund(user.id, "12")

        await ledger.withdraw(user.id, "5")
        with pytest.raises(InsufficientFunds):
            await ledger.withdraw(user.id, "8")
        with pytest.raises(InsufficientFunds):
            await yield_engine.upgrade(user.id, 1)

        await _assert_non_negative(store)
        async with store.read() as uow:
            assert (await uow.accounts.require(user.id)).primary_balance == Decimal("7")


class TestConcurrency:
    """Serialized read-modify-write."""

    @pytest.mark.asyncio
    async def test_concurrent_double_approve(self, accounts, admin, ledger, store):
        """Two simultaneous approvals credit once."""
        parent = await accounts.register("p@example.com", "pw")
        child = await accounts.register("c@example.com", "pw", parent.referral_code)
        tx = await ledger.deposit(child.id, "100")

        results = await asyncio.gather(
            ledger.approve(admin.id, tx.id),
            ledger.approve(admin.id, tx.id),
        )

        assert all(r.status == "approved" for r in results)
        async with store.read() as uow:
            assert (await uow.accounts.require(child.id)).primary_balance == Decimal("100")
            assert (await uow.accounts.require(parent.id)).primary_balance == Decimal("5")

    @pytest.mark.asyncio
    async def test_concurrent_withdrawals_cannot_overdraw(
        self, accounts, ledger, fund, store
    ):
        """Only as many withdrawals as the balance covers succeed."""
        user = await accounts.register("user@example.com", "pw")
        await fund(user.id, "50")

        results = await asyncio.gather(
            *(ledger.withdraw(user.id, "20") for _ in range(4)),
            return_exceptions=True,
        )

        refused = [r for r in results if isinstance(r, InsufficientFunds)]
        assert len(refused) == 2
        async with store.read() as uow:
            assert (await uow.accounts.require(user.id)).primary_balance == Decimal("10")
            assert len(await uow.transactions.get_by_account(user.id)) == 2


class TestAtomicity:
    """Failed units of work are rolled back."""

    @pytest.mark.asyncio
    async def test_exception_rolls_back(self, accounts, store):
        """Changes made before a failure are discarded."""
        user = await accounts.register("user@example.com", "pw")

        with pytest.raises(RuntimeError):
            async with store.begin() as uow:
                account: Account = await uow.accounts.require(user.id, for_update=True)
                account.primary_balance = Decimal("999")
                await uow.accounts.upsert(account)
                raise RuntimeError("boom")

        async with store.read() as uow:
            assert (await uow.accounts.require(user.id)).primary_balance == Decimal("0")
