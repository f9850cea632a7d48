"""Database seeding utilities for :mod:`ecb_rates`."""

from __future__ import annotations

from ecb_rates.seeds.populate_ecb_rates import seed_ecb_rates

__all__ = ["seed_ecb_rates"]
