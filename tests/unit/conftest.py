"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- In-memory Account objects (not persisted)
- Stub price sources
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from cloudminer.models.account import Account
from cloudminer.services.price_service import PriceQuote
from cloudminer.utils.exceptions import PriceUnavailable


@pytest.fixture
def make_account():
    """
    Factory for detached Account objects with zero balances.

    Returns:
        Callable building an Account from keyword overrides
    """

    def _make(**overrides) -> Account:
        values = {
            "id": "uid1234",
            "email": "miner@example.com",
            "secret_hash": "",
            "primary_balance": Decimal("0"),
            "secondary_balance": Decimal("0"),
            "tier": 0,
            "last_yield_at": None,
            "total_earned": Decimal("0"),
            "referral_code": "ABC123",
            "referred_by": None,
            "referral_count": 0,
            "referral_earnings": Decimal("0"),
            "blocked": False,
            "join_date": datetime(2025, 1, 1, tzinfo=UTC),
        }
        values.update(overrides)
        return Account(**values)

    return _make


class DownPriceSource:
    """Live source that is always unavailable."""

    def __init__(self) -> None:
        self.calls = 0

    async def quote(self, symbol: str) -> PriceQuote:
        self.calls += 1
        raise PriceUnavailable("feed down")


class FixedPriceSource:
    """Live source answering a fixed price."""

    def __init__(self, price: str) -> None:
        self.price = Decimal(price)

    async def quote(self, symbol: str) -> PriceQuote:
        return PriceQuote(symbol=symbol, price=self.price, change_percent=Decimal("0"))


@pytest.fixture
def down_source():
    """Price source that always fails."""
    return DownPriceSource()


@pytest.fixture
def fixed_source():
    """Price source quoting 50000."""
    return FixedPriceSource("50000")
