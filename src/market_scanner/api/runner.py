#!/usr/bin/env python3
"""FastAPI server runner."""

import uvicorn
import structlog

from market_scanner.config.loader import load_config
from market_scanner.logging.setup import setup_logging
from market_scanner.api.app import app

logger = structlog.get_logger()


def main(config_path: str | None = None):
    """Run the FastAPI server with the poller in the background."""
    config = load_config(config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)
    app.state.config = config

    logger.info("Starting FastAPI server", host=config.api.host, port=config.api.port)

    try:
        uvicorn.run(
            app,
            host=config.api.host,
            port=config.api.port,
            log_config=None  # Use our structlog setup
        )
    except Exception as e:
        logger.error("Failed to start server", error=str(e))
        raise


if __name__ == "__main__":
    main()
