"""Structured logging."""

from market_scanner.logging.setup import get_logger, refresh_context, setup_logging

__all__ = ["get_logger", "refresh_context", "setup_logging"]
