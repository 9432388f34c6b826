"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from market_scanner.exchange.base import MarketDataProvider
from market_scanner.models import Candle, ExchangeInfo, RawTicker

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_candles(closes, spread: Decimal = Decimal("0.5"), interval=timedelta(hours=1)) -> list[Candle]:
    """Candles with high/low *spread* around each close, oldest first."""
    candles = []
    for i, close in enumerate(closes):
        close = Decimal(str(close))
        open_time = T0 + i * interval
        candles.append(Candle(
            open_time=open_time,
            close_time=open_time + interval - timedelta(milliseconds=1),
            open=close,
            high=close + spread,
            low=close - spread,
            close=close,
            volume=Decimal(100),
        ))
    return candles


def rising_then_flat(n: int = 60, rise: int = 40, start: int = 100, step: int = 1) -> list[Decimal]:
    """*rise* bars climbing by *step*, then flat at the top."""
    return [Decimal(start + step * min(i, rise)) for i in range(n)]


def make_ticker(symbol: str, last_price="100", change_pct="1.0", volume="2000000", count=1000) -> RawTicker:
    return RawTicker(
        symbol=symbol,
        last_price=Decimal(last_price),
        price_change=Decimal(0),
        price_change_percent=Decimal(change_pct),
        volume=Decimal(volume),
        count=count,
    )


class FakeProvider(MarketDataProvider):
    """In-memory provider; per-symbol failures are injected as exceptions."""

    def __init__(self, tickers=None, candles=None, ratios=None, fail_klines=(), fail_ratio=(), delays=None):
        self.tickers = tickers or []
        self.candles = candles or {}
        self.ratios = ratios or {}
        self.fail_klines = set(fail_klines)
        self.fail_ratio = set(fail_ratio)
        self.delays = delays or {}
        self.kline_calls: list[tuple[str, str, int]] = []
        self.closed = False

    async def get_exchange_info(self) -> ExchangeInfo:
        return ExchangeInfo(symbols=[])

    async def get_24h_tickers(self) -> list[RawTicker]:
        return list(self.tickers)

    async def get_klines(self, symbol, interval="1h", limit=60):
        self.kline_calls.append((symbol, interval, limit))
        if symbol in self.delays:
            await asyncio.sleep(self.delays[symbol])
        if symbol in self.fail_klines:
            raise ConnectionError(f"klines unavailable for {symbol}")
        series = self.candles.get((symbol, interval)) or self.candles.get(symbol)
        if series is None:
            raise KeyError(symbol)
        return series

    async def get_long_short_ratio(self, symbol, period="5m"):
        if symbol in self.fail_ratio:
            raise ConnectionError(f"ratio unavailable for {symbol}")
        return self.ratios.get(symbol)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def btc_ticker() -> RawTicker:
    return RawTicker.model_validate({
        "symbol": "BTCUSDT",
        "lastPrice": "50000",
        "volume": "1000000",
        "priceChangePercent": "2.5",
    })
