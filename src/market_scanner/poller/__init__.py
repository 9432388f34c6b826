"""Poller — refreshes the market board on a fixed tick."""

from market_scanner.poller.board import MarketBoard
from market_scanner.poller.runner import refresh, run_loop

__all__ = ["MarketBoard", "refresh", "run_loop"]
