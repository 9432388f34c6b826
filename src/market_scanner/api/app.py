"""FastAPI application serving the latest enriched market board."""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from market_scanner.config.loader import load_config
from market_scanner.poller.board import MarketBoard
from market_scanner.poller.runner import run_loop

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the poller alongside the API for the life of the server."""
    board = MarketBoard(app.state.config.summary)
    app.state.board = board
    task = asyncio.create_task(run_loop(app.state.config, board))
    logger.info("Poller started")
    try:
        yield
    finally:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("Poller stopped")


app = FastAPI(
    title="Futures Market Scanner API",
    description="Latest futures tickers enriched with technical indicators",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - the dashboard is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.config = load_config(os.environ.get("SCANNER_CONFIG"))
app.state.board = MarketBoard(app.state.config.summary)


def get_board(request: Request) -> MarketBoard:
    """Dependency to get the market board."""
    return request.app.state.board


@app.get("/api/health")
async def health_check(board: MarketBoard = Depends(get_board)):
    """Health check endpoint."""
    return {
        "status": "healthy" if board.refreshed_at is not None else "starting",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "refreshedAt": board.refreshed_at.isoformat() if board.refreshed_at else None,
        "symbols": len(board.records),
        "lastError": board.last_error,
    }


@app.get("/api/markets")
async def list_markets(board: MarketBoard = Depends(get_board)):
    """All symbols from the latest refresh, enriched where possible."""
    return {
        "refreshedAt": board.refreshed_at.isoformat() if board.refreshed_at else None,
        "markets": [rec.flat() for rec in board.records.values()],
    }


@app.get("/api/markets/{symbol}")
async def get_market(symbol: str, board: MarketBoard = Depends(get_board)):
    rec = board.get(symbol)
    if rec is None:
        raise HTTPException(status_code=404, detail=f"Symbol {symbol!r} not found")
    return rec.flat()


@app.get("/api/summary")
async def get_summary(board: MarketBoard = Depends(get_board)):
    """BTC trend status, BTC volume dominance and the most traded symbols."""
    return board.summary().model_dump(mode="json")


@app.get("/api/listings/latest")
async def get_latest_listing(board: MarketBoard = Depends(get_board)):
    listing = board.latest_listing()
    if listing is None:
        raise HTTPException(status_code=404, detail="No listing data yet")
    return listing.model_dump(mode="json", by_alias=True)
