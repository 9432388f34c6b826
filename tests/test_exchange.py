"""Tests for the Binance futures client against a mocked transport."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import httpx
import pytest

from market_scanner.exchange import BinanceFuturesClient, MalformedPayloadError, RateLimitedError


def _client(handler) -> BinanceFuturesClient:
    return BinanceFuturesClient(transport=httpx.MockTransport(handler))


def _call(handler, method: str, *args, **kwargs):
    async def go():
        client = _client(handler)
        try:
            return await getattr(client, method)(*args, **kwargs)
        finally:
            await client.close()

    return asyncio.run(go())


KLINE = [1767225600000, "100.0", "101.0", "99.5", "100.5", "10.0", 1767229199999, "1005.0", 12, "5.0", "502.5", "0"]


class TestBinanceFuturesClient:
    def test_default_url(self):
        c = BinanceFuturesClient()
        assert c.base_url == "https://fapi.binance.com"

    def test_custom_url_strips_slash(self):
        c = BinanceFuturesClient(base_url="https://testnet.binancefuture.com/")
        assert c.base_url == "https://testnet.binancefuture.com"

    def test_24h_tickers(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/fapi/v1/ticker/24hr"
            return httpx.Response(200, json=[
                {"symbol": "BTCUSDT", "lastPrice": "50000.1", "priceChange": "10",
                 "priceChangePercent": "0.02", "volume": "123.4", "count": 99},
                {"symbol": "ETHUSDT", "lastPrice": "3000", "priceChange": "-1",
                 "priceChangePercent": "-0.03", "volume": "456", "count": 7},
            ])

        tickers = _call(handler, "get_24h_tickers")
        assert [t.symbol for t in tickers] == ["BTCUSDT", "ETHUSDT"]
        assert tickers[0].last_price == Decimal("50000.1")

    def test_24h_tickers_server_error_raises(self):
        def handler(request):
            return httpx.Response(503, json={"msg": "busy"})

        with pytest.raises(httpx.HTTPStatusError):
            _call(handler, "get_24h_tickers")

    def test_24h_tickers_wrong_shape(self):
        def handler(request):
            return httpx.Response(200, json={"code": -1003, "msg": "Too many requests"})

        with pytest.raises(MalformedPayloadError):
            _call(handler, "get_24h_tickers")

    def test_24h_tickers_bad_row_dropped(self):
        def handler(request):
            return httpx.Response(200, json=[
                {"symbol": "BTCUSDT", "lastPrice": "50000"},
                {"symbol": "BROKENUSDT", "lastPrice": "n/a"},
                {"lastPrice": "1"},
                {"symbol": "ETHUSDT", "lastPrice": "3000"},
            ])

        tickers = _call(handler, "get_24h_tickers")
        assert [t.symbol for t in tickers] == ["BTCUSDT", "ETHUSDT"]

    def test_24h_tickers_no_valid_row(self):
        def handler(request):
            return httpx.Response(200, json=[{"symbol": "BROKENUSDT"}])

        with pytest.raises(MalformedPayloadError):
            _call(handler, "get_24h_tickers")

    def test_24h_tickers_empty_list(self):
        def handler(request):
            return httpx.Response(200, json=[])

        assert _call(handler, "get_24h_tickers") == []

    def test_klines_params_and_parsing(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json=[KLINE, KLINE])

        candles = _call(handler, "get_klines", "BTCUSDT", interval="15m", limit=2)
        assert seen == {"symbol": "BTCUSDT", "interval": "15m", "limit": "2"}
        assert len(candles) == 2
        assert candles[0].close == Decimal("100.5")
        assert candles[0].low == Decimal("99.5")

    def test_klines_malformed_row(self):
        def handler(request):
            return httpx.Response(200, json=[["bad"]])

        with pytest.raises(MalformedPayloadError):
            _call(handler, "get_klines", "BTCUSDT")

    def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(MalformedPayloadError):
            _call(handler, "get_klines", "BTCUSDT")

    def test_long_short_ratio_latest(self):
        def handler(request):
            assert request.url.path == "/futures/data/globalLongShortAccountRatio"
            assert request.url.params["period"] == "5m"
            return httpx.Response(200, json=[
                {"symbol": "BTCUSDT", "longShortRatio": "1.7410", "timestamp": 1767225600000},
            ])

        assert _call(handler, "get_long_short_ratio", "BTCUSDT") == Decimal("1.7410")

    def test_long_short_ratio_empty(self):
        def handler(request):
            return httpx.Response(200, json=[])

        assert _call(handler, "get_long_short_ratio", "NEWUSDT") is None

    def test_exchange_info(self):
        def handler(request):
            return httpx.Response(200, json={
                "timezone": "UTC",
                "serverTime": 1767225600000,
                "symbols": [{"symbol": "BTCUSDT", "onboardDate": 1569398400000, "contractType": "PERPETUAL"}],
            })

        info = _call(handler, "get_exchange_info")
        assert info.symbols[0].symbol == "BTCUSDT"
        assert info.symbols[0].onboard_date.year == 2019

    def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200, json=[])

        async def go():
            client = BinanceFuturesClient(max_concurrency=3, transport=httpx.MockTransport(handler))
            try:
                await asyncio.gather(*(client.get_klines(f"S{i}USDT") for i in range(12)))
            finally:
                await client.close()

        asyncio.run(go())
        assert peak <= 3


class TestRateLimiting:
    def test_429_raises_and_blocks_for_retry_after(self):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(429, headers={"Retry-After": "30"}, json={"code": -1003})

        async def go():
            client = _client(handler)
            try:
                with pytest.raises(RateLimitedError) as first:
                    await client.get_klines("BTCUSDT")
                with pytest.raises(RateLimitedError) as second:
                    await client.get_24h_tickers()
                return first.value, second.value, client.backoff_remaining_s
            finally:
                await client.close()

        first, second, remaining = asyncio.run(go())
        assert first.status_code == 429
        assert first.retry_after_s == 30
        assert second.status_code == 429
        assert 0 < second.retry_after_s <= 30
        assert 0 < remaining <= 30
        # The blocked call never reached the exchange.
        assert calls == 1

    def test_418_without_header_uses_default_window(self):
        def handler(request):
            return httpx.Response(418)

        async def go():
            client = _client(handler)
            try:
                with pytest.raises(RateLimitedError) as err:
                    await client.get_24h_tickers()
                return err.value, client.backoff_remaining_s
            finally:
                await client.close()

        err, remaining = asyncio.run(go())
        assert err.status_code == 418
        assert err.retry_after_s == 60
        assert 55 < remaining <= 60

    def test_zero_retry_after_does_not_block(self):
        responses = iter([
            httpx.Response(429, headers={"Retry-After": "0"}),
            httpx.Response(200, json=[]),
        ])

        def handler(request):
            return next(responses)

        async def go():
            client = _client(handler)
            try:
                with pytest.raises(RateLimitedError):
                    await client.get_klines("BTCUSDT")
                return await client.get_klines("BTCUSDT")
            finally:
                await client.close()

        assert asyncio.run(go()) == []

    def test_other_errors_do_not_block(self):
        def handler(request):
            return httpx.Response(500)

        async def go():
            client = _client(handler)
            try:
                with pytest.raises(httpx.HTTPStatusError):
                    await client.get_klines("BTCUSDT")
                return client.backoff_remaining_s
            finally:
                await client.close()

        assert asyncio.run(go()) == 0
