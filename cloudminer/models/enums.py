"""
Enumerations shared by ledger models and services.
"""

from enum import Enum


class TransactionKind(str, Enum):
    """Kind of a ledger transaction."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class TransactionStatus(str, Enum):
    """Lifecycle status of a ledger transaction."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        """Approved and rejected are final."""
        return self is not TransactionStatus.PENDING


class SettlementDecision(str, Enum):
    """Administrator decision on a pending transaction."""

    APPROVE = "approve"
    REJECT = "reject"

    @property
    def target_status(self) -> TransactionStatus:
        """Status a transaction ends in after this decision."""
        if self is SettlementDecision.APPROVE:
            return TransactionStatus.APPROVED
        return TransactionStatus.REJECTED


class Currency(str, Enum):
    """The two balances held by every account."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def symbol(self) -> str:
        """Display symbol of the currency."""
        if self is Currency.PRIMARY:
            return "USDT"
        return "BTC"
