"""Market data provider abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from market_scanner.models import Candle, ExchangeInfo, RawTicker


class MarketDataProvider(ABC):
    """What the enrichment pipeline needs from an exchange.

    Implementations raise on network errors or unusable payloads; callers
    decide how far a failure propagates.
    """

    @abstractmethod
    async def get_exchange_info(self) -> ExchangeInfo:
        ...

    @abstractmethod
    async def get_24h_tickers(self) -> list[RawTicker]:
        ...

    @abstractmethod
    async def get_klines(self, symbol: str, interval: str = "1h", limit: int = 60) -> list[Candle]:
        """Most recent *limit* candles for *symbol*, oldest first."""
        ...

    @abstractmethod
    async def get_long_short_ratio(self, symbol: str, period: str = "5m") -> Decimal | None:
        ...

    @property
    def backoff_remaining_s(self) -> float:
        """Seconds until the exchange accepts requests again; 0 when not throttled."""
        return 0.0

    async def close(self) -> None:
        return None
