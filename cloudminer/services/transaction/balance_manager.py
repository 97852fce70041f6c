"""
Ledger balance manager.

Balance movements tied to transaction requests and settlements. Callers
pass accounts already loaded (and locked) in the current unit of work.
"""

from decimal import Decimal

from loguru import logger

from cloudminer.models.account import Account
from cloudminer.utils.exceptions import InsufficientFunds


class LedgerBalanceManager:
    """Escrow, refund and credit of the primary balance."""

    def escrow(self, account: Account, amount: Decimal, reference: str) -> None:
        """
        Deduct a withdrawal amount at request time.

        Args:
            account: Requesting account
            amount: Withdrawal amount
            reference: Transaction id (for logging)

        Raises:
            InsufficientFunds: If the primary balance is below the amount
        """
        if account.primary_balance < amount:
            logger.warning(
                "Insufficient balance for withdrawal escrow",
                extra={
                    "account_id": account.id,
                    "reference": reference,
                    "available": str(account.primary_balance),
                    "requested": str(amount),
                },
            )
            raise InsufficientFunds("Insufficient balance")

        balance_before = account.primary_balance
        account.primary_balance = balance_before - amount

        logger.info(
            "Balance escrowed for withdrawal",
            extra={
                "account_id": account.id,
                "reference": reference,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(account.primary_balance),
            },
        )

    def refund(self, account: Account, amount: Decimal, reference: str) -> None:
        """Return an escrowed withdrawal amount (rejected withdrawal)."""
        balance_before = account.primary_balance
        account.primary_balance = balance_before + amount

        logger.info(
            "Escrow refunded for rejected withdrawal",
            extra={
                "account_id": account.id,
                "reference": reference,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(account.primary_balance),
            },
        )

    def credit_deposit(self, account: Account, amount: Decimal, reference: str) -> None:
        """Credit an approved deposit."""
        balance_before = account.primary_balance
        account.primary_balance = balance_before + amount

        logger.info(
            "Deposit credited",
            extra={
                "account_id": account.id,
                "reference": reference,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(account.primary_balance),
            },
        )
