"""
Referral earnings manager.

Pays the one-level commission on approved deposits.
"""

from dataclasses import dataclass
from decimal import Decimal

from cloudminer.config.business_constants import REFERRAL_COMMISSION_RATE
from cloudminer.models.account import Account
from cloudminer.services.base_service import BaseService
from cloudminer.services.unit_of_work import UnitOfWork


@dataclass
class CommissionResult:
    """Commission credited to a referrer."""

    parent_id: str
    amount: Decimal


def calculate_commission(
    amount: Decimal, rate: Decimal = REFERRAL_COMMISSION_RATE
) -> Decimal:
    """
    Calculate the commission owed on a deposit.

    Args:
        amount: Approved deposit amount
        rate: Commission rate (0.05 = 5%)

    Returns:
        Commission amount (0 for non-positive input)
    """
    if amount <= 0 or rate <= 0:
        return Decimal("0")
    return amount * rate


class ReferralEarningsManager(BaseService):
    """Credits referral commissions to parent accounts."""

    async def pay_commission(
        self, uow: UnitOfWork, account: Account, amount: Decimal
    ) -> CommissionResult | None:
        """
        Credit the depositor's parent with its commission.

        Must only be called from deposit approval, inside the same unit of
        work that marks the deposit approved.

        Args:
            uow: Open unit of work
            account: Depositing account
            amount: Approved deposit amount

        Returns:
            Commission details, or None if nothing was paid
        """
        if not account.referred_by:
            return None

        parent = await uow.accounts.get_for_update(account.referred_by)
        if parent is None:
            self.logger.info(
                "Referrer no longer exists, no commission paid",
                extra={
                    "account_id": account.id,
                    "referred_by": account.referred_by,
                },
            )
            return None

        commission = calculate_commission(amount)
        if commission <= 0:
            return None

        parent.primary_balance += commission
        parent.referral_earnings = (parent.referral_earnings or Decimal("0")) + commission
        await uow.accounts.upsert(parent)

        self.logger.info(
            "Referral commission paid",
            extra={
                "parent_id": parent.id,
                "source_account_id": account.id,
                "deposit_amount": str(amount),
                "commission": str(commission),
            },
        )
        return CommissionResult(parent_id=parent.id, amount=commission)
