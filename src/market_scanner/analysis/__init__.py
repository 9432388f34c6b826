"""Indicator math, signal rules and market summaries — no I/O."""

from market_scanner.analysis.indicators import ema, ichimoku, midpoint, rsi, volatility
from market_scanner.analysis.signals import combine_signals, ema_signal, ichimoku_signal, macd_signal
from market_scanner.analysis.summary import latest_listing, market_summary

__all__ = [
    "combine_signals",
    "ema",
    "ema_signal",
    "ichimoku",
    "ichimoku_signal",
    "latest_listing",
    "macd_signal",
    "market_summary",
    "midpoint",
    "rsi",
    "volatility",
]
