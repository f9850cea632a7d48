"""In-memory backend strategy used for tests and throwaway runs."""

from __future__ import annotations

import dataclasses
from uuid import uuid4

from ecb_rates.db.base_backend import BackendStrategy
from ecb_rates.exceptions import StoreError
from ecb_rates.ingestion.models import AggregateStat, RateRecord
from ecb_rates.utils.aggregation import aggregate_records


class MemoryBackend(BackendStrategy):
    """Dictionary-backed store keyed by identity.

    It has no query engine of its own, so :meth:`aggregate` scans every
    record and reduces in-process.
    """

    def __init__(self) -> None:
        self._records: dict[str, RateRecord] = {}

    def ensure_schema(self) -> None:
        return None

    def find_by_date(self, rate_date: str) -> RateRecord | None:
        for record in self._records.values():
            if record.rate_date == rate_date:
                return _copy(record)
        return None

    def insert(self, record: RateRecord) -> str:
        identity = uuid4().hex
        self._records[identity] = dataclasses.replace(
            record, identity=identity, quotes=list(record.quotes)
        )
        return identity

    def replace(self, identity: str, record: RateRecord) -> None:
        if identity not in self._records:
            raise StoreError(f"No rates record with identity {identity}")
        self._records[identity] = dataclasses.replace(
            record, identity=identity, quotes=list(record.quotes)
        )

    def latest(self) -> RateRecord | None:
        if not self._records:
            return None
        return _copy(max(self._records.values(), key=lambda record: record.rate_date))

    def fetch_all(self) -> list[RateRecord]:
        return [_copy(record) for record in sorted(self._records.values(), key=lambda r: r.rate_date)]

    def aggregate(self) -> list[AggregateStat]:
        return aggregate_records(self._records.values())

    def __len__(self) -> int:
        return len(self._records)


def _copy(record: RateRecord) -> RateRecord:
    return dataclasses.replace(record, quotes=list(record.quotes))


__all__ = ["MemoryBackend"]
