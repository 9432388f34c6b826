"""Pydantic domain models."""

from market_scanner.models.market import (
    Candle,
    ExchangeInfo,
    RawTicker,
    SymbolInfo,
)
from market_scanner.models.record import (
    EmaPair,
    EnrichedRecord,
    IchimokuLines,
    IndicatorSet,
    TrendSignal,
)
from market_scanner.models.summary import BtcStatus, MarketSummary, TopTrade, VolumeDominance

__all__ = [
    "BtcStatus",
    "Candle",
    "EmaPair",
    "EnrichedRecord",
    "ExchangeInfo",
    "IchimokuLines",
    "IndicatorSet",
    "MarketSummary",
    "RawTicker",
    "SymbolInfo",
    "TopTrade",
    "TrendSignal",
    "VolumeDominance",
]
