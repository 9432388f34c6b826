"""Poller runner — main async loop that refreshes the board on a tick."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

import structlog

from market_scanner.config.loader import load_config
from market_scanner.config.schema import AppConfig, EnrichmentConfig
from market_scanner.enrichment.orchestrator import enrich_snapshot
from market_scanner.exchange.base import MarketDataProvider
from market_scanner.exchange.binance import BinanceFuturesClient
from market_scanner.exchange.errors import RateLimitedError
from market_scanner.logging.setup import refresh_context, setup_logging
from market_scanner.models import EnrichedRecord
from market_scanner.poller.board import MarketBoard

log = structlog.get_logger("poller")

# A new tick is skipped while this many refreshes are still running.
MAX_OVERLAPPING_REFRESHES = 2


def build_client(config: AppConfig) -> BinanceFuturesClient:
    return BinanceFuturesClient(
        base_url=config.exchange.base_url,
        timeout_s=config.exchange.timeout_s,
        max_concurrency=config.exchange.max_concurrency,
    )


async def refresh(
    client: MarketDataProvider,
    board: MarketBoard,
    settings: EnrichmentConfig,
) -> dict[str, EnrichedRecord]:
    """One cycle: fetch the ticker snapshot, enrich it, publish it.

    A failed snapshot fetch propagates; nothing is published for the cycle.
    Every log line from the cycle carries the same ``refresh_id``.
    """
    started_at = datetime.now(timezone.utc)
    t0 = time.monotonic()
    with refresh_context():
        tickers = await client.get_24h_tickers()
        records = await enrich_snapshot(client, tickers, settings)
        published = board.publish(records, started_at)
        log.info(
            "refresh_complete",
            symbols=len(records),
            enriched=sum(1 for r in records.values() if r.enriched),
            published=published,
            duration_ms=round((time.monotonic() - t0) * 1000),
        )
    return records


async def _guarded_refresh(
    client: MarketDataProvider,
    board: MarketBoard,
    settings: EnrichmentConfig,
) -> None:
    try:
        await refresh(client, board, settings)
    except RateLimitedError as exc:
        board.record_failure(exc)
        log.warning("refresh_rate_limited", status=exc.status_code, retry_after_s=exc.retry_after_s)
    except Exception as exc:
        board.record_failure(exc)
        log.exception("refresh_failed")


async def ticker_poller(
    client: MarketDataProvider,
    board: MarketBoard,
    config: AppConfig,
) -> None:
    """Start a refresh every poll interval without waiting for the last one."""
    in_flight: set[asyncio.Task] = set()
    try:
        while True:
            if len(in_flight) >= MAX_OVERLAPPING_REFRESHES:
                log.warning("refresh_skipped", in_flight=len(in_flight))
            else:
                task = asyncio.create_task(_guarded_refresh(client, board, config.enrichment))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
            # A throttled client stretches the tick to its Retry-After window.
            await asyncio.sleep(max(config.exchange.poll_interval_s, client.backoff_remaining_s))
    finally:
        for task in in_flight:
            task.cancel()


async def exchange_info_poller(
    client: MarketDataProvider,
    board: MarketBoard,
    interval_s: int = 60,
) -> None:
    """Poll contract metadata at low frequency."""
    while True:
        try:
            info = await client.get_exchange_info()
            board.set_exchange_info(info)
            log.debug("exchange_info_refreshed", symbols=len(info.symbols))
        except Exception:
            log.exception("exchange_info_failed")

        await asyncio.sleep(interval_s)


async def run_loop(
    config: AppConfig,
    board: MarketBoard | None = None,
    client: MarketDataProvider | None = None,
) -> None:
    """Run both pollers until cancelled."""
    board = board if board is not None else MarketBoard()
    client = client if client is not None else build_client(config)

    log.info(
        "poller_started",
        base_url=config.exchange.base_url,
        poll_interval_s=config.exchange.poll_interval_s,
        interval=config.enrichment.kline_interval,
    )

    try:
        await asyncio.gather(
            ticker_poller(client, board, config),
            exchange_info_poller(client, board, config.exchange.exchange_info_interval_s),
        )
    finally:
        await client.close()


def main(config_path: str | None = None) -> None:
    """Entry point — load config, set up logging, run the async loop."""
    config = load_config(config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)
    asyncio.run(run_loop(config))
