"""Enriched record models — what one refresh cycle hands to consumers."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from market_scanner.models.market import RawTicker

TrendSignal = Literal["bullish", "bearish", "neutral"]


class _RecordModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class IchimokuLines(_RecordModel):
    """Ichimoku lines; a line is None when history is too short for its window."""

    tenkan_sen: Decimal | None = None
    kijun_sen: Decimal | None = None
    senkou_span_a: Decimal | None = None
    senkou_span_b: Decimal | None = None

    @property
    def complete(self) -> bool:
        return None not in (
            self.tenkan_sen,
            self.kijun_sen,
            self.senkou_span_a,
            self.senkou_span_b,
        )


class EmaPair(_RecordModel):
    ema12: Decimal | None = None
    ema26: Decimal | None = None


class IndicatorSet(_RecordModel):
    """Indicators derived for one symbol in one refresh.

    A signal of None means it could not be computed, which is not the same
    as a computed "neutral".
    """

    rsi: Decimal | None = None
    ema12: Decimal | None = None
    ema26: Decimal | None = None
    ema50: Decimal | None = None
    timeframe_emas: dict[str, EmaPair] = Field(default_factory=dict)
    ichimoku: IchimokuLines = Field(default_factory=IchimokuLines)
    macd: TrendSignal | None = None
    volatility: Decimal | None = None
    ema_signal: TrendSignal | None = None
    ichimoku_signal: TrendSignal | None = None
    ia_signal: TrendSignal | None = None

    def flat(self) -> dict[str, Any]:
        """JSON-ready dict with ``ema12_5m``-style keys for each timeframe."""
        out = self.model_dump(mode="json", by_alias=True, exclude={"timeframe_emas"})
        for tf, pair in self.timeframe_emas.items():
            out[f"ema12_{tf}"] = None if pair.ema12 is None else str(pair.ema12)
            out[f"ema26_{tf}"] = None if pair.ema26 is None else str(pair.ema26)
        return out


class EnrichedRecord(_RecordModel):
    """A ticker plus whatever enrichment succeeded for it.

    ``ticker`` is always the snapshot row as fetched.
    """

    ticker: RawTicker
    technical_indicators: IndicatorSet | None = None
    long_short_ratio: Decimal | None = None
    btc_dominance: Decimal | None = None

    @property
    def symbol(self) -> str:
        return self.ticker.symbol

    @property
    def enriched(self) -> bool:
        return self.technical_indicators is not None

    def flat(self) -> dict[str, Any]:
        """Ticker fields in exchange naming with enrichment merged on top."""
        row = self.ticker.model_dump(mode="json", by_alias=True, exclude_none=True)
        ratio = self.long_short_ratio if self.long_short_ratio is not None else self.ticker.long_short_ratio
        row["longShortRatio"] = None if ratio is None else str(ratio)
        row["btcDominance"] = None if self.btc_dominance is None else str(self.btc_dominance)
        row["technicalIndicators"] = (
            self.technical_indicators.flat() if self.technical_indicators is not None else None
        )
        return row
