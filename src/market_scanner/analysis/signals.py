"""Categorical trend signals derived from indicator values."""

from __future__ import annotations

from decimal import Decimal

from market_scanner.models import TrendSignal


def ema_signal(price: Decimal, ema: Decimal, previous_ema: Decimal) -> TrendSignal:
    """Price vs. EMA combined with the EMA's own slope.

    bullish: price above the EMA and the EMA rising.
    bearish: price not above the EMA and the EMA not rising.
    Mixed cases are neutral.
    """
    above = price > ema
    rising = ema > previous_ema
    if above and rising:
        return "bullish"
    if not above and not rising:
        return "bearish"
    return "neutral"


def ichimoku_signal(
    price: Decimal,
    tenkan_sen: Decimal,
    kijun_sen: Decimal,
    senkou_span_a: Decimal,
    senkou_span_b: Decimal,
    prev_tenkan_sen: Decimal,
    prev_kijun_sen: Decimal,
) -> TrendSignal:
    """Majority vote over TK cross, price vs. cloud, and cloud colour.

    The cross and cloud-position votes may abstain; cloud colour always
    votes. Ties are neutral.
    """
    bullish = 0
    bearish = 0

    if tenkan_sen > kijun_sen and prev_tenkan_sen <= prev_kijun_sen:
        bullish += 1
    elif tenkan_sen < kijun_sen and prev_tenkan_sen >= prev_kijun_sen:
        bearish += 1

    if price > max(senkou_span_a, senkou_span_b):
        bullish += 1
    elif price < min(senkou_span_a, senkou_span_b):
        bearish += 1

    if senkou_span_a > senkou_span_b:
        bullish += 1
    else:
        bearish += 1

    if bullish > bearish:
        return "bullish"
    if bearish > bullish:
        return "bearish"
    return "neutral"


def combine_signals(a: TrendSignal, b: TrendSignal) -> TrendSignal:
    """Merge two signals; neutral defers to the other, opposites cancel."""
    if a == b:
        return a
    if a == "neutral":
        return b
    if b == "neutral":
        return a
    return "neutral"


def macd_signal(
    price_change_percent: Decimal,
    volume: Decimal,
    volume_threshold: Decimal | float = 1_000_000,
) -> TrendSignal:
    """Momentum label: bullish on a positive 24h move with enough volume."""
    if price_change_percent > 0 and volume > Decimal(str(volume_threshold)):
        return "bullish"
    return "bearish"
