"""Allow running the poller as: python -m market_scanner.poller [--config path]."""

import argparse

from market_scanner.poller.runner import main

parser = argparse.ArgumentParser(description="Futures market poller")
parser.add_argument("--config", default=None, help="Path to config.yaml")
args = parser.parse_args()
main(config_path=args.config)
