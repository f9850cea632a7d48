"""In-process flatten/group/reduce for stores without native grouping."""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from ecb_rates.ingestion.models import AggregateStat, RateRecord


def aggregate_records(records: Iterable[RateRecord]) -> list[AggregateStat]:
    """Compute per-currency min/max/avg over every quote of every record.

    Mirrors the unwind -> group -> sort pipeline executed by MongoDB. The mean
    is computed by pandas, so the last bits may differ from a store that sums
    in another order.
    """

    flattened = [
        {"currency": quote.currency, "rate": quote.rate}
        for record in records
        for quote in record.quotes
    ]
    if not flattened:
        return []
    frame = pd.DataFrame(flattened, columns=["currency", "rate"])
    grouped = frame.groupby("currency", sort=True)["rate"].agg(["min", "max", "mean"])
    return [
        AggregateStat(
            currency=str(currency),
            min=float(row["min"]),
            max=float(row["max"]),
            avg=float(row["mean"]),
        )
        for currency, row in grouped.iterrows()
    ]


__all__ = ["aggregate_records"]
