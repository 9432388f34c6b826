"""HTTP API over the market board."""
