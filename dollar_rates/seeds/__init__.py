"""Rate update jobs for :mod:`dollar_rates`."""

from __future__ import annotations

from dollar_rates.seeds.populate_bank_rates import apply_outcome, update_all_rates

__all__ = ["apply_outcome", "update_all_rates"]
