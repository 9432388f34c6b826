"""Futures market scanner: ticker snapshots enriched with technical indicators."""
