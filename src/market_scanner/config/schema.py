"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ExchangeConfig(BaseModel):
    base_url: str = "https://fapi.binance.com"
    poll_interval_s: float = 5
    exchange_info_interval_s: int = 60
    timeout_s: float = 15.0
    # Upper bound on in-flight requests against the exchange.
    max_concurrency: int = 20


class EnrichmentConfig(BaseModel):
    kline_interval: str = "1h"
    kline_limit: int = 60
    rsi_period: int = 14
    # Extra timeframes fetched per symbol for ema12/ema26 pairs.
    ema_timeframes: list[str] = Field(default_factory=list)
    ratio_period: str = "5m"
    long_short_ratio: bool = True
    dominance_symbol: str = "BTCDOMUSDT"
    macd_volume_threshold: float = 1_000_000
    # Per-symbol budget, counted from when the symbol gets a slot.
    symbol_timeout_s: float = 20.0
    max_symbols_in_flight: int = 10
    # Only these symbols are enriched; empty means all of them.
    symbols: list[str] = Field(default_factory=list)


# Contracts Binance has delisted but may still report in the 24h snapshot.
DELISTED_SYMBOLS = [
    "DGBUSDT", "WAVESUSDT", "MDTUSDT", "RADUSDT", "STRAXUSDT",
    "SLPUSDT", "IDEXUSDT", "CVXUSDT", "SNTUSDT", "STPTUSDT",
    "CTKUSDT", "GLMRUSDT", "AGIXUSDT", "OCEANUSDT", "MATICUSDT",
]


class SummaryConfig(BaseModel):
    # Top trades are ranked only over symbols quoted in this asset.
    quote_asset: str = "USDT"
    excluded_symbols: list[str] = Field(default_factory=lambda: list(DELISTED_SYMBOLS))
    top_trades_min_volume: int = 10_000_000
    top_trades_limit: int = 5


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"


class ApiConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
