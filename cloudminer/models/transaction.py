"""
Transaction model.

Append-only record of deposit and withdrawal requests and their lifecycle.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cloudminer.models.base import Base
from cloudminer.models.enums import TransactionKind, TransactionStatus
from cloudminer.models.types import MoneyType


class Transaction(Base):
    """
    Ledger transaction entity.

    The owning account is referenced by id only: transactions outlive
    deleted accounts and keep the email snapshot taken at creation.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="check_transaction_amount_positive"),
        Index("idx_transactions_account_created", "account_id", "created_at"),
        Index("idx_transactions_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    account_id: Mapped[str] = mapped_column(String(32), nullable=False)
    account_email: Mapped[str] = mapped_column(String(255), nullable=False)

    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), default=TransactionStatus.PENDING.value, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Opaque settlement details
    network: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    proof: Mapped[str] = mapped_column(Text, default="", nullable=False)

    @property
    def is_deposit(self) -> bool:
        """Check if transaction is a deposit."""
        return self.kind == TransactionKind.DEPOSIT.value

    @property
    def is_withdrawal(self) -> bool:
        """Check if transaction is a withdrawal."""
        return self.kind == TransactionKind.WITHDRAW.value

    @property
    def is_pending(self) -> bool:
        """Check if transaction still awaits settlement."""
        return self.status == TransactionStatus.PENDING.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id!r}, account_id={self.account_id!r}, "
            f"kind={self.kind}, amount={self.amount}, status={self.status})>"
        )
