"""
Administrative override service.

Privileged mutations of arbitrary accounts. Every operation first checks
that the caller is the configured administrator (id and email both
match) and runs in a single unit of work.
"""

from decimal import Decimal

from cloudminer.config.plans import FREE_TIER, is_known_tier
from cloudminer.models.account import Account
from cloudminer.models.enums import Currency
from cloudminer.models.types import (
    CRYPTO_MONEY_LIMIT,
    CRYPTO_MONEY_SCALE,
    MONEY_LIMIT,
    MONEY_SCALE,
)
from cloudminer.services.base_service import BaseService, log_operation
from cloudminer.services.referral.chain_manager import ReferralChainManager
from cloudminer.services.unit_of_work import LedgerStore
from cloudminer.utils.exceptions import InvalidAmount, InvalidPlan, ProtectedAccount
from cloudminer.utils.validation import normalize_email, validate_money

# Currency -> (decimal places, exclusive upper bound) of its balance column
BALANCE_LIMITS: dict[Currency, tuple[int, Decimal]] = {
    Currency.PRIMARY: (MONEY_SCALE, MONEY_LIMIT),
    Currency.SECONDARY: (CRYPTO_MONEY_SCALE, CRYPTO_MONEY_LIMIT),
}


class AdminService(BaseService):
    """Administrator overrides on accounts."""

    def __init__(self, store: LedgerStore) -> None:
        """
        Initialize admin service.

        Args:
            store: Ledger store
        """
        super().__init__(store)
        self.chain_manager = ReferralChainManager(store)

    def _is_protected(self, account: Account) -> bool:
        admin = self.store.admin
        return (
            account.id == admin.account_id
            or normalize_email(account.email) == admin.email
        )

    @log_operation
    async def toggle_block(self, admin_id: str, target_id: str) -> Account:
        """
        Block an active account or unblock a blocked one.

        Args:
            admin_id: Caller account id
            target_id: Account to toggle

        Returns:
            Updated account

        Raises:
            Unauthorized: If the caller is not the administrator
            AccountNotFound: If the target does not exist
            ProtectedAccount: If the target is the administrator
        """
        async with self.store.begin() as uow:
            await self.require_admin(uow, admin_id)
            account = await uow.accounts.require(target_id, for_update=True)
            if self._is_protected(account):
                raise ProtectedAccount("Cannot block the administrator account")

            account.blocked = not account.blocked
            await uow.accounts.upsert(account)

            self.logger.info(
                "Account block toggled",
                extra={"target_id": target_id, "blocked": account.blocked},
            )
            return account

    @log_operation
    async def adjust_funds(
        self,
        admin_id: str,
        target_id: str,
        currency: Currency | str,
        delta: Decimal | int | float | str,
    ) -> Account:
        """
        Add a signed amount to one balance of an account.

        A negative delta larger than the balance leaves the balance at 0.

        Args:
            admin_id: Caller account id
            target_id: Account to adjust
            currency: Balance to adjust
            delta: Signed amount

        Returns:
            Updated account

        Raises:
            InvalidAmount: If delta is not a number, has more decimal
                places than the balance stores or the result is out of range
        """
        currency = Currency(currency)
        scale, limit = BALANCE_LIMITS[currency]
        delta = validate_money(delta, scale=scale, limit=limit)

        async with self.store.begin() as uow:
            await self.require_admin(uow, admin_id)
            account = await uow.accounts.require(target_id, for_update=True)

            before = account.balance_of(currency)
            after = max(before + delta, Decimal("0"))
            if after >= limit:
                raise InvalidAmount(f"{currency.value} balance would be out of range.")
            account.set_balance(currency, after)
            await uow.accounts.upsert(account)

            self.logger.info(
                "Balance adjusted by administrator",
                extra={
                    "target_id": target_id,
                    "currency": currency.value,
                    "delta": str(delta),
                    "balance_before": str(before),
                    "balance_after": str(after),
                },
            )
            return account

    @log_operation
    async def force_set_tier(
        self, admin_id: str, target_id: str, level: int
    ) -> Account:
        """
        Set an account tier without charging for it.

        Both upgrades and downgrades are allowed. The yield cooldown
        restarts.

        Raises:
            InvalidPlan: If the level is neither free nor a plan level
        """
        if level != FREE_TIER and not is_known_tier(level):
            raise InvalidPlan(f"Invalid plan level: {level}")

        async with self.store.begin() as uow:
            await self.require_admin(uow, admin_id)
            account = await uow.accounts.require(target_id, for_update=True)

            previous = account.tier
            account.tier = level
            account.last_yield_at = self.now()
            await uow.accounts.upsert(account)

            self.logger.info(
                "Tier forced by administrator",
                extra={"target_id": target_id, "from": previous, "to": level},
            )
            return account

    @log_operation
    async def reset_account(self, admin_id: str, target_id: str) -> Account:
        """Zero both balances and the earnings counters of an account."""
        async with self.store.begin() as uow:
            await self.require_admin(uow, admin_id)
            account = await uow.accounts.require(target_id, for_update=True)

            account.primary_balance = Decimal("0")
            account.secondary_balance = Decimal("0")
            account.total_earned = Decimal("0")
            account.referral_earnings = Decimal("0")
            await uow.accounts.upsert(account)

            self.logger.info("Account reset", extra={"target_id": target_id})
            return account

    @log_operation
    async def delete_account(self, admin_id: str, target_id: str) -> None:
        """
        Permanently delete an account.

        Its referrer loses one referral; accounts it referred keep their
        link to the deleted id. Its transactions stay in the ledger.

        Raises:
            ProtectedAccount: If the target is the administrator
            AccountNotFound: If the target does not exist
        """
        async with self.store.begin() as uow:
            await self.require_admin(uow, admin_id)
            account = await uow.accounts.require(target_id, for_update=True)
            if self._is_protected(account):
                raise ProtectedAccount("Cannot delete the administrator account")

            await self.chain_manager.detach(uow, account)
            await uow.accounts.delete_account(target_id)

    @log_operation
    async def relink_referrer(
        self, admin_id: str, target_id: str, code: str
    ) -> Account:
        """
        Move an account under the owner of a referral code.

        Returns:
            The new parent account

        Raises:
            InvalidCode: If the code matches no account
            SelfReferral: If the code belongs to the target itself
        """
        async with self.store.begin() as uow:
            await self.require_admin(uow, admin_id)
            child = await uow.accounts.require(target_id, for_update=True)
            return await self.chain_manager.relink(uow, child, code)

    async def list_accounts(self, admin_id: str) -> list[Account]:
        """All accounts, newest first (admin only)."""
        async with self.store.read() as uow:
            await self.require_admin(uow, admin_id)
            return await uow.accounts.list_all()
