"""
Price feed.

Read-only market quotes used to convert the secondary currency into the
primary one. The live source queries the CoinGecko markets endpoint; the
fallback source answers from a static table whenever the live source is
unavailable.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

import aiohttp
from loguru import logger

from cloudminer.config.settings import settings
from cloudminer.utils.exceptions import PriceUnavailable


@dataclass(frozen=True)
class PriceQuote:
    """Price of one unit of an asset in the primary currency."""

    symbol: str
    price: Decimal
    change_percent: Decimal


class PriceSource(Protocol):
    """Anything that can quote a symbol."""

    async def quote(self, symbol: str) -> PriceQuote:
        """Return the current quote or raise PriceUnavailable."""
        ...


# Symbol -> CoinGecko coin id
COINGECKO_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "XRP": "ripple",
    "DOGE": "dogecoin",
}

FALLBACK_QUOTES: dict[str, PriceQuote] = {
    "BTC": PriceQuote("BTC", Decimal("64230"), Decimal("2.5")),
    "ETH": PriceQuote("ETH", Decimal("3450"), Decimal("1.2")),
    "SOL": PriceQuote("SOL", Decimal("145"), Decimal("-0.5")),
    "XRP": PriceQuote("XRP", Decimal("0.62"), Decimal("0.1")),
    "DOGE": PriceQuote("DOGE", Decimal("0.12"), Decimal("5.0")),
}


class CoinGeckoPriceSource:
    """Live quotes from the CoinGecko public API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize price source.

        Args:
            base_url: API root (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.base_url = (base_url or settings.price_api_url).rstrip("/")
        self.timeout = timeout or settings.price_request_timeout
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def quote(self, symbol: str) -> PriceQuote:
        """
        Fetch the current USD price of a symbol.

        Args:
            symbol: Ticker such as 'BTC'

        Returns:
            Price quote

        Raises:
            PriceUnavailable: On unknown symbol, HTTP or payload errors
        """
        symbol = symbol.upper()
        coin_id = COINGECKO_IDS.get(symbol)
        if coin_id is None:
            raise PriceUnavailable(f"No price feed for {symbol}")

        params = {"vs_currency": "usd", "ids": coin_id}
        try:
            session = await self._get_session()
            async with session.get(
                f"{self.base_url}/coins/markets",
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise PriceUnavailable(
                        f"Price API returned HTTP {response.status}"
                    )
                data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise PriceUnavailable(f"Price API request failed: {e}") from e
        except TimeoutError as e:
            raise PriceUnavailable("Price API request timed out") from e
        except ValueError as e:
            raise PriceUnavailable("Price API returned invalid JSON") from e

        # Markets endpoint answers with a list; errors come back as objects
        if not isinstance(data, list) or not data:
            raise PriceUnavailable(f"No market data for {symbol}")

        market = data[0]
        if not isinstance(market, dict):
            raise PriceUnavailable(f"Malformed market data for {symbol}")
        try:
            return PriceQuote(
                symbol=symbol,
                price=Decimal(str(market["current_price"])),
                change_percent=Decimal(
                    str(market.get("price_change_percentage_24h") or 0)
                ),
            )
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise PriceUnavailable(f"Malformed market data for {symbol}") from e


class FallbackPriceSource:
    """Live quotes with a static table as fallback."""

    def __init__(
        self,
        live: PriceSource | None = None,
        fallback: dict[str, PriceQuote] | None = None,
    ) -> None:
        """
        Initialize fallback source.

        Args:
            live: Preferred source (CoinGecko by default)
            fallback: Static quotes used when the live source fails
        """
        self.live = live or CoinGeckoPriceSource()
        self.fallback = fallback if fallback is not None else FALLBACK_QUOTES

    async def quote(self, symbol: str) -> PriceQuote:
        """
        Quote a symbol, falling back to the static table.

        Raises:
            PriceUnavailable: If neither source knows the symbol
        """
        symbol = symbol.upper()
        try:
            return await self.live.quote(symbol)
        except PriceUnavailable as e:
            quote = self.fallback.get(symbol)
            if quote is None:
                raise
            logger.warning(
                f"Live price for {symbol} unavailable, using fallback: {e}"
            )
            return quote

    async def quotes(self, symbols: list[str]) -> list[PriceQuote]:
        """Quote several symbols in order."""
        return [await self.quote(symbol) for symbol in symbols]

    async def close(self) -> None:
        """Close the live source if it holds resources."""
        close = getattr(self.live, "close", None)
        if close is not None:
            await close()
