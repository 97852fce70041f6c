"""
Referral query manager.

Read helpers for the team view.
"""

from dataclasses import dataclass
from decimal import Decimal

from cloudminer.models.account import Account
from cloudminer.services.base_service import BaseService


@dataclass
class ReferralSummary:
    """Aggregate referral figures of one account."""

    account_id: str
    referral_code: str
    referral_count: int
    referral_earnings: Decimal
    referrals: list[Account]


class ReferralQueryManager(BaseService):
    """Referral queries."""

    async def list_referrals(self, account_id: str) -> list[Account]:
        """
        Get accounts referred by the given account, newest first.

        Raises:
            AccountNotFound: If the account does not exist
        """
        async with self.store.read() as uow:
            await uow.accounts.require(account_id)
            return await uow.accounts.get_referrals(account_id)

    async def get_summary(self, account_id: str) -> ReferralSummary:
        """
        Get referral code, counters and direct referrals of an account.

        Raises:
            AccountNotFound: If the account does not exist
        """
        async with self.store.read() as uow:
            account = await uow.accounts.require(account_id)
            referrals = await uow.accounts.get_referrals(account_id)
            return ReferralSummary(
                account_id=account.id,
                referral_code=account.referral_code,
                referral_count=account.referral_count,
                referral_earnings=account.referral_earnings,
                referrals=referrals,
            )
