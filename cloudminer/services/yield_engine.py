"""
Yield engine.

Cooldown-gated mining payouts and plan (tier) purchases.

Per account the engine is either Ready or Cooling, depending on how long
ago the last collection happened compared to the 24 hour window. The
cooldown is data-driven: a cooling account is refused, never waited on.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from cloudminer.config.business_constants import (
    FREE_YIELD_RATE,
    LEADERBOARD_SIZE,
    YIELD_COOLDOWN,
)
from cloudminer.config.plans import FREE_TIER, get_plan
from cloudminer.models.account import Account
from cloudminer.models.enums import Currency
from cloudminer.services.base_service import BaseService, log_operation
from cloudminer.utils.datetime_utils import ensure_aware, hours_until
from cloudminer.utils.exceptions import (
    AlreadyOwned,
    Cooling,
    InsufficientFunds,
    InvalidPlan,
)


@dataclass
class YieldResult:
    """Outcome of a successful collection."""

    account: Account
    currency: Currency
    amount: Decimal

    @property
    def message(self) -> str:
        """Human-readable payout, e.g. '1.00 USDT'."""
        if self.currency is Currency.SECONDARY:
            return f"{self.amount:.10f} {self.currency.symbol}"
        return f"{self.amount:.2f} {self.currency.symbol}"


@dataclass
class YieldStatus:
    """Point-in-time view of an account's mining state."""

    account_id: str
    tier: int
    ready: bool
    hours_remaining: int
    next_currency: Currency
    next_amount: Decimal


@dataclass
class LeaderboardEntry:
    """One row of the earnings leaderboard."""

    rank: int
    account_id: str
    total_earned: Decimal
    tier: int


def cooldown_remaining(
    last_yield_at: datetime | None,
    now: datetime,
    cooldown: timedelta = YIELD_COOLDOWN,
) -> timedelta:
    """
    Time left before the next collection is allowed.

    Args:
        last_yield_at: Last collection (None = never collected)
        now: Current time
        cooldown: Window length

    Returns:
        Remaining interval, zero when ready
    """
    if last_yield_at is None:
        return timedelta(0)
    elapsed = ensure_aware(now) - ensure_aware(last_yield_at)
    if elapsed >= cooldown:
        return timedelta(0)
    return cooldown - elapsed


def payout_for_tier(tier: int) -> tuple[Currency, Decimal]:
    """
    Currency and amount paid per collection for a tier.

    Raises:
        InvalidPlan: If a non-free tier has no plan entry
    """
    if tier == FREE_TIER:
        return Currency.SECONDARY, FREE_YIELD_RATE
    plan = get_plan(tier)
    if plan is None:
        raise InvalidPlan(f"Invalid plan level: {tier}")
    return Currency.PRIMARY, plan.daily_yield


class YieldEngine(BaseService):
    """Mining payouts and plan upgrades."""

    @log_operation
    async def collect(self, account_id: str) -> YieldResult:
        """
        Collect the yield of the current window.

        Args:
            account_id: Account ID

        Returns:
            Credited currency and amount

        Raises:
            AccountNotFound: If the account does not exist
            AccountBlocked: If the account is blocked
            Cooling: If the window has not elapsed yet
            InvalidPlan: If the account tier has no plan entry
        """
        async with self.store.begin() as uow:
            account = await self.require_active(uow, account_id)
            now = self.now()

            remaining = cooldown_remaining(account.last_yield_at, now)
            if remaining > timedelta(0):
                raise Cooling(hours_until(remaining))

            currency, amount = payout_for_tier(account.tier)
            if currency is Currency.PRIMARY:
                account.primary_balance += amount
                account.total_earned += amount
            else:
                account.secondary_balance += amount

            # Cooldown restarts only after the credit succeeded
            account.last_yield_at = now
            await uow.accounts.upsert(account)

            self.logger.info(
                "Yield collected",
                extra={
                    "account_id": account.id,
                    "tier": account.tier,
                    "currency": currency.value,
                    "amount": str(amount),
                },
            )
            return YieldResult(account=account, currency=currency, amount=amount)

    @log_operation
    async def upgrade(self, account_id: str, target_level: int) -> Account:
        """
        Purchase a higher plan with primary balance.

        Purchasing restarts the yield cooldown.

        Args:
            account_id: Account ID
            target_level: Plan level to buy

        Returns:
            Updated account

        Raises:
            InvalidPlan: If the level has no plan entry
            AlreadyOwned: If the account tier is already at or above the level
            InsufficientFunds: If the primary balance is below the plan cost
        """
        plan = get_plan(target_level)
        if plan is None:
            raise InvalidPlan(f"Invalid plan level: {target_level}")

        async with self.store.begin() as uow:
            account = await self.require_active(uow, account_id)

            if account.tier >= target_level:
                raise AlreadyOwned("You already have this level or higher.")
            if account.primary_balance < plan.cost:
                raise InsufficientFunds(f"Insufficient balance. Need {plan.cost}.")

            balance_before = account.primary_balance
            account.primary_balance -= plan.cost
            account.tier = target_level
            account.last_yield_at = self.now()
            await uow.accounts.upsert(account)

            self.logger.info(
                "Plan upgraded",
                extra={
                    "account_id": account.id,
                    "level": target_level,
                    "cost": str(plan.cost),
                    "balance_before": str(balance_before),
                    "balance_after": str(account.primary_balance),
                },
            )
            return account

    async def status(self, account_id: str) -> YieldStatus:
        """
        Get readiness and next payout of an account.

        Raises:
            AccountNotFound: If the account does not exist
        """
        async with self.store.read() as uow:
            account = await uow.accounts.require(account_id)

        remaining = cooldown_remaining(account.last_yield_at, self.now())
        try:
            currency, amount = payout_for_tier(account.tier)
        except InvalidPlan:
            currency, amount = Currency.PRIMARY, Decimal("0")

        return YieldStatus(
            account_id=account.id,
            tier=account.tier,
            ready=remaining == timedelta(0),
            hours_remaining=hours_until(remaining),
            next_currency=currency,
            next_amount=amount,
        )

    async def leaderboard(self, limit: int = LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
        """
        Rank accounts by total yield earned.

        Args:
            limit: Number of rows

        Returns:
            Leaderboard rows with masked account ids
        """
        async with self.store.read() as uow:
            accounts = await uow.accounts.top_earners(limit)

        return [
            LeaderboardEntry(
                rank=index,
                account_id=account.masked_id,
                total_earned=account.total_earned,
                tier=account.tier,
            )
            for index, account in enumerate(accounts, start=1)
        ]
