"""Per-symbol enrichment pipeline."""

from market_scanner.enrichment.orchestrator import (
    build_indicator_set,
    dominance_price,
    enrich_snapshot,
    enrich_symbol,
)

__all__ = ["build_indicator_set", "dominance_price", "enrich_snapshot", "enrich_symbol"]
