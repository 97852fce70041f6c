"""
Swap service.

Converts mined secondary currency into primary balance at the current
market price.
"""

from dataclasses import dataclass
from decimal import Decimal

from cloudminer.config.business_constants import SECONDARY_PRICE_SYMBOL
from cloudminer.models.account import Account
from cloudminer.models.types import (
    CRYPTO_MONEY_LIMIT,
    CRYPTO_MONEY_SCALE,
    MONEY_LIMIT,
)
from cloudminer.services.base_service import BaseService, log_operation
from cloudminer.services.price_service import FallbackPriceSource, PriceSource
from cloudminer.services.unit_of_work import LedgerStore
from cloudminer.utils.exceptions import InsufficientFunds, InvalidAmount
from cloudminer.utils.validation import quantize_money, validate_positive_amount


@dataclass
class SwapResult:
    """Outcome of a swap."""

    account: Account
    secondary_spent: Decimal
    primary_received: Decimal
    price: Decimal


class SwapService(BaseService):
    """Secondary to primary currency conversion."""

    def __init__(
        self,
        store: LedgerStore,
        price_source: PriceSource | None = None,
    ) -> None:
        """
        Initialize swap service.

        Args:
            store: Ledger store
            price_source: Quote provider (live with static fallback by default)
        """
        super().__init__(store)
        self.price_source = price_source or FallbackPriceSource()

    async def close(self) -> None:
        """Release the price source (HTTP session of the live feed)."""
        close = getattr(self.price_source, "close", None)
        if close is not None:
            await close()

    @log_operation
    async def swap_secondary_to_primary(
        self, account_id: str, amount: Decimal | int | str
    ) -> SwapResult:
        """
        Sell secondary balance for primary balance.

        The quote is fetched before the ledger is locked.

        Args:
            account_id: Account ID
            amount: Secondary amount to sell

        Returns:
            Swap result

        Raises:
            InvalidAmount: If amount is not positive, too precise or the
                proceeds do not fit the primary balance
            AccountBlocked: If the account is blocked
            InsufficientFunds: If the secondary balance is too low
            PriceUnavailable: If no quote can be obtained
        """
        amount = validate_positive_amount(
            amount, scale=CRYPTO_MONEY_SCALE, limit=CRYPTO_MONEY_LIMIT
        )
        quote = await self.price_source.quote(SECONDARY_PRICE_SYMBOL)
        received = amount * quote.price
        if received >= MONEY_LIMIT:
            raise InvalidAmount("Swap amount is out of range.")
        received = quantize_money(received)
        if received <= 0:
            raise InvalidAmount("Swap amount is too small.")

        async with self.store.begin() as uow:
            account = await self.require_active(uow, account_id)
            if account.secondary_balance < amount:
                raise InsufficientFunds(
                    f"Insufficient {SECONDARY_PRICE_SYMBOL} balance"
                )

            account.secondary_balance -= amount
            account.primary_balance += received
            await uow.accounts.upsert(account)

            self.logger.info(
                "Secondary balance swapped",
                extra={
                    "account_id": account.id,
                    "amount": str(amount),
                    "price": str(quote.price),
                    "received": str(received),
                },
            )
            return SwapResult(
                account=account,
                secondary_spent=amount,
                primary_received=received,
                price=quote.price,
            )
