"""
Account model.

Represents a registered user of the mining app: balances, tier,
yield bookkeeping and one-level referral linkage.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from cloudminer.models.base import Base
from cloudminer.models.enums import Currency
from cloudminer.models.types import CryptoMoneyType, MoneyType


class Account(Base):
    """
    Account entity.

    Attributes:
        id: Opaque account id ("uid" + 4 digits, or the admin id)
        email: Normalized (lowercased, trimmed) unique email
        secret_hash: bcrypt hash of the account secret
        primary_balance: Stable-unit balance
        secondary_balance: Crypto-unit balance
        tier: 0 for the free tier, otherwise a plan level
        last_yield_at: Last successful yield collection (None = never)
        total_earned: Cumulative primary-currency yield
        referral_code: Code other users register with
        referred_by: Parent account id (may point to a deleted account)
        referral_count: Number of accounts referred by this one
        referral_earnings: Sum of commissions paid to this account
        blocked: Blocked accounts cannot authenticate or transact
        join_date: Creation timestamp
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            "primary_balance >= 0", name="check_account_primary_non_negative"
        ),
        CheckConstraint(
            "secondary_balance >= 0",
            name="check_account_secondary_non_negative",
        ),
        CheckConstraint("tier >= 0", name="check_account_tier_non_negative"),
        CheckConstraint(
            "referral_count >= 0",
            name="check_account_referral_count_non_negative",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    secret_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Balances
    primary_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    secondary_balance: Mapped[Decimal] = mapped_column(
        CryptoMoneyType, default=Decimal("0"), nullable=False
    )

    # Mining
    tier: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_yield_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    total_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Referral
    referral_code: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    referred_by: Mapped[str | None] = mapped_column(
        String(32), nullable=True, index=True
    )
    referral_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    referral_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Status
    blocked: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    join_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def balance_of(self, currency: Currency) -> Decimal:
        """Get the balance held in the given currency."""
        if currency is Currency.PRIMARY:
            return self.primary_balance
        return self.secondary_balance

    def set_balance(self, currency: Currency, value: Decimal) -> None:
        """Set the balance held in the given currency."""
        if currency is Currency.PRIMARY:
            self.primary_balance = value
        else:
            self.secondary_balance = value

    @property
    def masked_id(self) -> str:
        """Account id shortened for public listings."""
        if len(self.id) > 4:
            return f"{self.id[:4]}...{self.id[-2:]}"
        return self.id

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Account(id={self.id!r}, email={self.email!r}, "
            f"tier={self.tier}, primary={self.primary_balance}, "
            f"secondary={self.secondary_balance}, blocked={self.blocked})>"
        )
