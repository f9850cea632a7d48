"""Helpers for normalising rate dates."""

from __future__ import annotations

from datetime import date, datetime


def normalise_rate_date(value: str | date) -> str:
    """Return the rate-date key used by the stores.

    Strings are matched verbatim (the feed publishes ISO dates) so they are
    only stripped; :class:`date` values are rendered in ISO format.
    """

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value.strip()


__all__ = ["normalise_rate_date"]
