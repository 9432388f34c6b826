"""Allow running the API as: python -m market_scanner.api [--config path]."""

import argparse

from market_scanner.api.runner import main

parser = argparse.ArgumentParser(description="Futures market scanner API")
parser.add_argument("--config", default=None, help="Path to config.yaml")
args = parser.parse_args()
main(config_path=args.config)
