"""In-memory board holding the latest published refresh."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from types import MappingProxyType

import structlog

from market_scanner.analysis.summary import latest_listing, market_summary
from market_scanner.config.schema import SummaryConfig
from market_scanner.models import EnrichedRecord, ExchangeInfo, MarketSummary, SymbolInfo

log = structlog.get_logger("board")


class MarketBoard:
    """Latest-wins store of enriched records.

    A refresh is published whole. A refresh that started before the one
    currently on the board is dropped, so a slow cycle can never overwrite
    a newer one.
    """

    def __init__(self, summary_settings: SummaryConfig | None = None) -> None:
        self.summary_settings = summary_settings or SummaryConfig()
        self._records: dict[str, EnrichedRecord] = {}
        self._started_at: datetime | None = None
        self.refreshed_at: datetime | None = None
        self.exchange_info: ExchangeInfo | None = None
        self.last_error: str | None = None

    @property
    def records(self) -> Mapping[str, EnrichedRecord]:
        return MappingProxyType(self._records)

    def get(self, symbol: str) -> EnrichedRecord | None:
        return self._records.get(symbol.upper())

    def publish(self, records: Mapping[str, EnrichedRecord], started_at: datetime) -> bool:
        """Replace the board with *records*; False if they are stale."""
        if self._started_at is not None and started_at < self._started_at:
            log.debug(
                "stale_refresh_dropped",
                started_at=started_at.isoformat(),
                current=self._started_at.isoformat(),
            )
            return False
        self._records = dict(records)
        self._started_at = started_at
        self.refreshed_at = datetime.now(timezone.utc)
        self.last_error = None
        return True

    def record_failure(self, error: BaseException) -> None:
        """Note a failed refresh; the published records stay as they were."""
        self.last_error = repr(error)

    def set_exchange_info(self, info: ExchangeInfo) -> None:
        self.exchange_info = info

    def summary(self) -> MarketSummary:
        return market_summary(self._records, self.summary_settings)

    def latest_listing(self) -> SymbolInfo | None:
        if self.exchange_info is None:
            return None
        return latest_listing(self.exchange_info)
