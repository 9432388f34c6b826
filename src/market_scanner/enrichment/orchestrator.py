"""Enrichment orchestrator — fan out over the ticker snapshot, one pipeline per symbol.

Each symbol's candles, long/short ratio and extra-timeframe series are
fetched concurrently and merged onto its ticker. A failure anywhere in one
symbol's pipeline only removes the fields that depended on it; the batch
always returns one record per ticker.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from decimal import Decimal

import structlog

from market_scanner.analysis.indicators import ema12, ema26, ema50, ichimoku, rsi, volatility
from market_scanner.analysis.signals import combine_signals, ema_signal, ichimoku_signal, macd_signal
from market_scanner.config.schema import EnrichmentConfig
from market_scanner.exchange.base import MarketDataProvider
from market_scanner.models import Candle, EmaPair, EnrichedRecord, IndicatorSet, RawTicker

log = structlog.get_logger("enrichment")


def dominance_price(tickers: Sequence[RawTicker], symbol: str) -> Decimal | None:
    """Last price of the dominance index instrument, if it is in the snapshot."""
    for t in tickers:
        if t.symbol == symbol:
            return t.last_price
    return None


def build_indicator_set(
    ticker: RawTicker,
    candles: Sequence[Candle],
    rsi_period: int = 14,
    macd_volume_threshold: float = 1_000_000,
    timeframe_emas: dict[str, EmaPair] | None = None,
) -> IndicatorSet:
    """Compute every indicator and signal for one symbol from its candles."""
    closes = [c.close for c in candles]
    price = ticker.last_price

    e50 = ema50(closes)
    prev_e50 = ema50(closes[:-1])
    trend = ema_signal(price, e50, prev_e50) if e50 is not None and prev_e50 is not None else None

    lines = ichimoku(candles)
    prev_lines = ichimoku(candles[:-1])
    cloud = None
    if lines.complete and prev_lines.tenkan_sen is not None and prev_lines.kijun_sen is not None:
        cloud = ichimoku_signal(
            price,
            lines.tenkan_sen,
            lines.kijun_sen,
            lines.senkou_span_a,
            lines.senkou_span_b,
            prev_lines.tenkan_sen,
            prev_lines.kijun_sen,
        )

    combined = combine_signals(trend, cloud) if trend is not None and cloud is not None else None

    return IndicatorSet(
        rsi=rsi(closes, period=rsi_period),
        ema12=ema12(closes),
        ema26=ema26(closes),
        ema50=e50,
        timeframe_emas=timeframe_emas or {},
        ichimoku=lines,
        macd=macd_signal(ticker.price_change_percent, ticker.volume, macd_volume_threshold),
        volatility=volatility(ticker.price_change_percent),
        ema_signal=trend,
        ichimoku_signal=cloud,
        ia_signal=combined,
    )


def _ema_pair(candles: Sequence[Candle]) -> EmaPair:
    closes = [c.close for c in candles]
    return EmaPair(ema12=ema12(closes), ema26=ema26(closes))


async def _ratio_or_none(
    client: MarketDataProvider,
    symbol: str,
    settings: EnrichmentConfig,
) -> Decimal | None:
    if not settings.long_short_ratio:
        return None
    return await client.get_long_short_ratio(symbol, period=settings.ratio_period)


async def enrich_symbol(
    client: MarketDataProvider,
    ticker: RawTicker,
    settings: EnrichmentConfig,
    btc_dominance: Decimal | None = None,
) -> EnrichedRecord:
    """Fetch and compute everything for one symbol.

    Fetch failures are absorbed here field by field. Only an error raised
    while computing indicators escapes, and the caller degrades the record.
    """
    symbol = ticker.symbol
    extra_timeframes = [tf for tf in settings.ema_timeframes if tf != settings.kline_interval]

    candles, ratio, *extra = await asyncio.gather(
        client.get_klines(symbol, interval=settings.kline_interval, limit=settings.kline_limit),
        _ratio_or_none(client, symbol, settings),
        *(client.get_klines(symbol, interval=tf, limit=settings.kline_limit) for tf in extra_timeframes),
        return_exceptions=True,
    )

    if isinstance(ratio, BaseException):
        log.warning("long_short_ratio_failed", symbol=symbol, error=repr(ratio))
        ratio = None

    indicators = None
    if isinstance(candles, BaseException):
        log.warning("candle_fetch_failed", symbol=symbol, error=repr(candles))
    else:
        pairs = {settings.kline_interval: _ema_pair(candles)}
        for tf, series in zip(extra_timeframes, extra):
            if isinstance(series, BaseException):
                log.debug("timeframe_fetch_failed", symbol=symbol, interval=tf, error=repr(series))
                continue
            pairs[tf] = _ema_pair(series)
        indicators = build_indicator_set(
            ticker,
            candles,
            rsi_period=settings.rsi_period,
            macd_volume_threshold=settings.macd_volume_threshold,
            timeframe_emas=pairs,
        )

    return EnrichedRecord(
        ticker=ticker,
        technical_indicators=indicators,
        long_short_ratio=ratio,
        btc_dominance=btc_dominance,
    )


async def enrich_snapshot(
    client: MarketDataProvider,
    tickers: Sequence[RawTicker],
    settings: EnrichmentConfig | None = None,
) -> dict[str, EnrichedRecord]:
    """Enrich every ticker in the snapshot; never fails as a whole.

    Holds no state between calls, so overlapping refreshes are independent.
    """
    settings = settings or EnrichmentConfig()
    btc_dominance = dominance_price(tickers, settings.dominance_symbol)
    wanted = set(settings.symbols)
    gate = asyncio.Semaphore(settings.max_symbols_in_flight)

    async def _bounded(ticker: RawTicker) -> EnrichedRecord:
        async with gate:
            return await asyncio.wait_for(
                enrich_symbol(client, ticker, settings, btc_dominance),
                timeout=settings.symbol_timeout_s,
            )

    targets = [t for t in tickers if not wanted or t.symbol in wanted]
    outcomes = await asyncio.gather(*(_bounded(t) for t in targets), return_exceptions=True)

    records: dict[str, EnrichedRecord] = {
        t.symbol: EnrichedRecord(ticker=t, btc_dominance=btc_dominance)
        for t in tickers
    }
    for ticker, outcome in zip(targets, outcomes):
        if isinstance(outcome, BaseException):
            log.warning("symbol_enrichment_failed", symbol=ticker.symbol, error=repr(outcome))
            continue
        records[ticker.symbol] = outcome

    enriched = sum(1 for r in records.values() if r.enriched)
    log.info(
        "enrichment_complete",
        symbols=len(records),
        enriched=enriched,
        degraded=len(targets) - enriched,
    )
    return records
