"""CLI entry point for refreshing bank rates."""

from __future__ import annotations

from dollar_rates.seeds.populate_bank_rates import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    main()
