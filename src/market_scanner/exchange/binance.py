"""Binance USD-M futures client — public REST market data."""

from __future__ import annotations

import asyncio
import time
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from market_scanner.exchange.base import MarketDataProvider
from market_scanner.exchange.errors import MalformedPayloadError, RateLimitedError
from market_scanner.models import Candle, ExchangeInfo, RawTicker

log = structlog.get_logger("binance")

# 429 is a request-weight throttle; 418 means the IP has been banned.
RATE_LIMIT_STATUSES = (418, 429)
DEFAULT_RETRY_AFTER_S = 60.0


def _retry_after(resp: httpx.Response) -> float:
    raw = resp.headers.get("Retry-After")
    try:
        return max(float(raw), 0.0) if raw is not None else DEFAULT_RETRY_AFTER_S
    except ValueError:
        return DEFAULT_RETRY_AFTER_S


class BinanceFuturesClient(MarketDataProvider):
    """Async client for Binance's public futures endpoints.

    Every request goes through one semaphore so a fan-out over the whole
    symbol list never has more than *max_concurrency* requests in flight.

    A 429 or 418 closes the client for the ``Retry-After`` window: until it
    passes, every call raises :class:`RateLimitedError` without touching the
    network.
    """

    def __init__(
        self,
        base_url: str = "https://fapi.binance.com",
        timeout_s: float = 15.0,
        max_concurrency: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.max_concurrency = max_concurrency
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._limiter: asyncio.Semaphore | None = None
        self._blocked_until = 0.0
        self._blocked_status = 429

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> BinanceFuturesClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def backoff_remaining_s(self) -> float:
        return max(self._blocked_until - time.monotonic(), 0.0)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        # Created lazily so the semaphore binds to the running loop.
        if self._limiter is None:
            self._limiter = asyncio.Semaphore(self.max_concurrency)
        http = await self._get_http()
        async with self._limiter:
            remaining = self.backoff_remaining_s
            if remaining > 0:
                raise RateLimitedError(self._blocked_status, remaining)
            resp = await http.get(path, params=params)
        if resp.status_code in RATE_LIMIT_STATUSES:
            retry_after = _retry_after(resp)
            self._blocked_until = max(self._blocked_until, time.monotonic() + retry_after)
            self._blocked_status = resp.status_code
            log.warning("rate_limited", path=path, status=resp.status_code, retry_after_s=retry_after)
            raise RateLimitedError(resp.status_code, retry_after)
        resp.raise_for_status()
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedPayloadError(path, "response is not JSON") from exc

    async def get_exchange_info(self) -> ExchangeInfo:
        """Fetch contract metadata (symbols, onboard dates, assets)."""
        data = await self._get("/fapi/v1/exchangeInfo")
        try:
            return ExchangeInfo.model_validate(data)
        except ValidationError as exc:
            raise MalformedPayloadError("/fapi/v1/exchangeInfo", str(exc)) from exc

    async def get_24h_tickers(self) -> list[RawTicker]:
        """Fetch the 24h rolling ticker for every listed symbol.

        Rows that fail validation are dropped and logged. Only a snapshot
        in which no row validates is treated as malformed.
        """
        data = await self._get("/fapi/v1/ticker/24hr")
        if not isinstance(data, list):
            raise MalformedPayloadError("/fapi/v1/ticker/24hr", f"expected list, got {type(data).__name__}")
        tickers: list[RawTicker] = []
        for row in data:
            try:
                tickers.append(RawTicker.model_validate(row))
            except ValidationError as exc:
                symbol = row.get("symbol") if isinstance(row, dict) else None
                log.warning("ticker_row_dropped", symbol=symbol, errors=exc.error_count())
        if data and not tickers:
            raise MalformedPayloadError("/fapi/v1/ticker/24hr", f"none of {len(data)} rows validated")
        return tickers

    async def get_klines(
        self,
        symbol: str,
        interval: str = "1h",
        limit: int = 60,
    ) -> list[Candle]:
        """Fetch the most recent *limit* candles, oldest first.

        Each raw kline is ``[openTime, open, high, low, close, volume,
        closeTime, quoteVolume, trades, ...]``.
        """
        data = await self._get(
            "/fapi/v1/klines",
            params={"symbol": symbol, "interval": interval, "limit": limit},
        )
        if not isinstance(data, list):
            raise MalformedPayloadError("/fapi/v1/klines", f"expected list, got {type(data).__name__}")
        try:
            return [Candle.from_kline(row) for row in data]
        except (ValidationError, IndexError, TypeError, KeyError) as exc:
            raise MalformedPayloadError("/fapi/v1/klines", f"bad kline for {symbol}: {exc}") from exc

    async def get_long_short_ratio(self, symbol: str, period: str = "5m") -> Decimal | None:
        """Most recent global long/short account ratio, or None if none reported."""
        data = await self._get(
            "/futures/data/globalLongShortAccountRatio",
            params={"symbol": symbol, "period": period, "limit": 1},
        )
        if not isinstance(data, list):
            raise MalformedPayloadError(
                "/futures/data/globalLongShortAccountRatio",
                f"expected list, got {type(data).__name__}",
            )
        if not data:
            return None
        # Ordered oldest first; take the latest reading.
        raw = data[-1].get("longShortRatio") if isinstance(data[-1], dict) else None
        if raw is None:
            return None
        try:
            return Decimal(str(raw))
        except InvalidOperation as exc:
            raise MalformedPayloadError(
                "/futures/data/globalLongShortAccountRatio", f"bad ratio {raw!r}"
            ) from exc
