"""Config loader — reads YAML, applies SCANNER_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from market_scanner.config.schema import AppConfig


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        SCANNER_BASE_URL         -> exchange.base_url
        SCANNER_MAX_CONCURRENCY  -> exchange.max_concurrency
        SCANNER_LOG_LEVEL        -> logging.level
        SCANNER_LOG_FORMAT       -> logging.format
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    # Apply env var overrides
    base_url = os.environ.get("SCANNER_BASE_URL")
    if base_url:
        data.setdefault("exchange", {})["base_url"] = base_url

    max_concurrency = os.environ.get("SCANNER_MAX_CONCURRENCY")
    if max_concurrency:
        data.setdefault("exchange", {})["max_concurrency"] = int(max_concurrency)

    log_level = os.environ.get("SCANNER_LOG_LEVEL")
    if log_level:
        data.setdefault("logging", {})["level"] = log_level

    log_format = os.environ.get("SCANNER_LOG_FORMAT")
    if log_format:
        data.setdefault("logging", {})["format"] = log_format

    return AppConfig.model_validate(data)
