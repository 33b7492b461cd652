"""Rate acquisition: per-bank fetchers, extractors and the fan-out coordinator."""
