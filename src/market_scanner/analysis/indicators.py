"""Technical indicators — pure functions on price series."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from statistics import mean

from market_scanner.models import Candle, IchimokuLines

# Smoothing constants per named EMA. Larger alpha reacts faster, so
# ema12 > ema26 > ema50 in reactivity.
EMA12_ALPHA = Decimal("0.15")
EMA26_ALPHA = Decimal("0.07")
EMA50_ALPHA = Decimal("0.038")

TENKAN_WINDOW = 9
KIJUN_WINDOW = 26
SENKOU_B_WINDOW = 52


def rsi(closes: Sequence[Decimal], period: int = 14) -> Decimal | None:
    """Relative Strength Index (Wilder's smoothing).

    Returns a Decimal in [0, 100] or None if there are fewer than
    ``period + 1`` data points.
    """
    if len(closes) < period + 1:
        return None

    deltas = [closes[i] - closes[i - 1] for i in range(1, len(closes))]

    # Seed with simple average of first *period* changes
    gains = [d if d > 0 else Decimal(0) for d in deltas[:period]]
    losses = [-d if d < 0 else Decimal(0) for d in deltas[:period]]
    avg_gain = Decimal(mean(gains))
    avg_loss = Decimal(mean(losses))

    # Wilder smoothing over remaining deltas
    for d in deltas[period:]:
        avg_gain = (avg_gain * (period - 1) + (d if d > 0 else Decimal(0))) / period
        avg_loss = (avg_loss * (period - 1) + (-d if d < 0 else Decimal(0))) / period

    if avg_loss == 0:
        return Decimal(100)
    rs = avg_gain / avg_loss
    return Decimal(100) - Decimal(100) / (1 + rs)


def ema(closes: Sequence[Decimal], alpha: Decimal) -> Decimal | None:
    """Exponential moving average seeded with the first close.

    Applies ``acc = acc * (1 - alpha) + price * alpha`` across the whole
    series and returns the final value, or None for an empty series.
    """
    if not closes:
        return None
    acc = closes[0]
    for price in closes:
        acc = acc * (1 - alpha) + price * alpha
    return acc


def ema12(closes: Sequence[Decimal]) -> Decimal | None:
    return ema(closes, EMA12_ALPHA)


def ema26(closes: Sequence[Decimal]) -> Decimal | None:
    return ema(closes, EMA26_ALPHA)


def ema50(closes: Sequence[Decimal]) -> Decimal | None:
    return ema(closes, EMA50_ALPHA)


def midpoint(candles: Sequence[Candle], window: int) -> Decimal | None:
    """(highest high + lowest low) / 2 over the last *window* candles."""
    if window <= 0 or len(candles) < window:
        return None
    recent = candles[-window:]
    return (max(c.high for c in recent) + min(c.low for c in recent)) / 2


def ichimoku(candles: Sequence[Candle]) -> IchimokuLines:
    """Tenkan-sen, Kijun-sen and Senkou spans as of the last candle.

    Lines whose window is longer than the available history are None;
    Senkou Span A needs both Tenkan and Kijun.
    """
    tenkan = midpoint(candles, TENKAN_WINDOW)
    kijun = midpoint(candles, KIJUN_WINDOW)
    span_a = (tenkan + kijun) / 2 if tenkan is not None and kijun is not None else None
    return IchimokuLines(
        tenkan_sen=tenkan,
        kijun_sen=kijun,
        senkou_span_a=span_a,
        senkou_span_b=midpoint(candles, SENKOU_B_WINDOW),
    )


def volatility(price_change_percent: Decimal) -> Decimal:
    """24h volatility proxy: magnitude of the 24h percent change."""
    return abs(price_change_percent)
