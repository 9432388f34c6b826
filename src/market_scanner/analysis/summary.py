"""Market-wide summaries computed over a full set of enriched records."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from decimal import Decimal

from market_scanner.config.schema import SummaryConfig
from market_scanner.models import (
    BtcStatus,
    EnrichedRecord,
    ExchangeInfo,
    MarketSummary,
    SymbolInfo,
    TopTrade,
    VolumeDominance,
)

BTC_SYMBOL = "BTCUSDT"


def btc_status(records: Mapping[str, EnrichedRecord], symbol: str = BTC_SYMBOL) -> BtcStatus:
    """Bullish when the price sits above both ema12 and ema26."""
    rec = records.get(symbol)
    if rec is None:
        return BtcStatus()
    price = rec.ticker.last_price
    ind = rec.technical_indicators
    if ind is None or ind.ema12 is None or ind.ema26 is None:
        return BtcStatus(price=price)
    status = "bullish" if price > ind.ema12 and price > ind.ema26 else "bearish"
    return BtcStatus(price=price, status=status)


def volume_dominance(
    records: Mapping[str, EnrichedRecord],
    symbol: str = BTC_SYMBOL,
) -> VolumeDominance:
    """Share of total 24h volume traded in *symbol*, as a percentage."""
    rec = records.get(symbol)
    total = sum((r.ticker.volume for r in records.values()), Decimal(0))
    if rec is None or total == 0:
        return VolumeDominance(symbol=symbol)
    pct = rec.ticker.volume / total * 100
    return VolumeDominance(
        symbol=symbol,
        dominance_pct=pct,
        status="bullish" if pct > 50 else "bearish",
    )


def top_trades(
    records: Iterable[EnrichedRecord],
    min_volume: Decimal | int = 10_000_000,
    limit: int = 5,
    quote_asset: str | None = "USDT",
    excluded: Collection[str] = (),
) -> list[TopTrade]:
    """Most actively traded symbols by trade count, above a volume floor.

    Only symbols quoted in *quote_asset* are ranked (any quote when None),
    and symbols in *excluded* never are.
    """
    floor = Decimal(min_volume)
    candidates = [
        r.ticker
        for r in records
        if r.ticker.volume > floor
        and (quote_asset is None or r.ticker.symbol.endswith(quote_asset))
        and r.ticker.symbol not in excluded
    ]
    candidates.sort(key=lambda t: t.count or 0, reverse=True)
    return [
        TopTrade(symbol=t.symbol, count=t.count or 0, volume=t.volume)
        for t in candidates[:limit]
    ]


def market_summary(
    records: Mapping[str, EnrichedRecord],
    settings: SummaryConfig | None = None,
) -> MarketSummary:
    settings = settings or SummaryConfig()
    dominance_index = next(
        (r.btc_dominance for r in records.values() if r.btc_dominance is not None),
        None,
    )
    return MarketSummary(
        btc=btc_status(records),
        dominance=volume_dominance(records),
        top_trades=top_trades(
            records.values(),
            min_volume=settings.top_trades_min_volume,
            limit=settings.top_trades_limit,
            quote_asset=settings.quote_asset,
            excluded=frozenset(settings.excluded_symbols),
        ),
        btc_dominance_index=dominance_index,
    )


def latest_listing(exchange_info: ExchangeInfo) -> SymbolInfo | None:
    """The most recently onboarded contract, or None if none carry a date."""
    dated = [s for s in exchange_info.symbols if s.onboard_date is not None]
    if not dated:
        return None
    return max(dated, key=lambda s: s.onboard_date)
