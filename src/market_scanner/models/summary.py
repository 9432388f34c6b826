"""Market-wide summary models."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from market_scanner.models.record import TrendSignal


class BtcStatus(BaseModel):
    price: Decimal | None = None
    status: TrendSignal = "neutral"


class VolumeDominance(BaseModel):
    symbol: str
    dominance_pct: Decimal | None = None
    status: TrendSignal = "neutral"


class TopTrade(BaseModel):
    symbol: str
    count: int
    volume: Decimal


class MarketSummary(BaseModel):
    btc: BtcStatus
    dominance: VolumeDominance
    top_trades: list[TopTrade] = []
    btc_dominance_index: Decimal | None = None
