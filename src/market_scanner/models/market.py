"""Exchange-facing market models — tickers, candles, symbol metadata."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def ms_to_dt(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class ExchangeModel(BaseModel):
    """Immutable model that reads and writes the exchange's camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class RawTicker(ExchangeModel):
    """One row of the 24h ticker snapshot."""

    symbol: str
    last_price: Decimal
    price_change: Decimal = Decimal(0)
    price_change_percent: Decimal = Decimal(0)
    volume: Decimal = Decimal(0)
    quote_volume: Decimal | None = None
    count: int | None = None
    long_short_ratio: Decimal | None = None


class Candle(ExchangeModel):
    """One OHLCV bar."""

    open_time: datetime
    close_time: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def _parse_ms(cls, v: Any) -> Any:
        if isinstance(v, int):
            return ms_to_dt(v)
        return v

    @classmethod
    def from_kline(cls, row: list[Any]) -> Candle:
        """Build from the kline array ``[openTime, o, h, l, c, v, closeTime, ...]``."""
        return cls(
            open_time=row[0],
            open=row[1],
            high=row[2],
            low=row[3],
            close=row[4],
            volume=row[5],
            close_time=row[6],
        )


class SymbolInfo(ExchangeModel):
    """Contract metadata from exchangeInfo."""

    symbol: str
    pair: str | None = None
    contract_type: str | None = None
    onboard_date: datetime | None = None
    status: str | None = None
    base_asset: str | None = None
    quote_asset: str | None = None

    @field_validator("onboard_date", mode="before")
    @classmethod
    def _parse_ms(cls, v: Any) -> Any:
        if isinstance(v, int):
            return ms_to_dt(v)
        return v


class ExchangeInfo(ExchangeModel):
    symbols: list[SymbolInfo] = Field(default_factory=list)
    server_time: datetime | None = None
    timezone: str | None = None

    @field_validator("server_time", mode="before")
    @classmethod
    def _parse_ms(cls, v: Any) -> Any:
        if isinstance(v, int):
            return ms_to_dt(v)
        return v
