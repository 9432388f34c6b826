"""Exchange API clients."""

from market_scanner.exchange.base import MarketDataProvider
from market_scanner.exchange.binance import BinanceFuturesClient
from market_scanner.exchange.errors import ExchangeError, MalformedPayloadError, RateLimitedError

__all__ = [
    "BinanceFuturesClient",
    "ExchangeError",
    "MalformedPayloadError",
    "MarketDataProvider",
    "RateLimitedError",
]
