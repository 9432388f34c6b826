"""Configuration system."""

from market_scanner.config.loader import load_config
from market_scanner.config.schema import AppConfig, EnrichmentConfig, ExchangeConfig, SummaryConfig

__all__ = ["AppConfig", "EnrichmentConfig", "ExchangeConfig", "SummaryConfig", "load_config"]
