"""Read-only queries over the stored rate records."""

from __future__ import annotations

from datetime import date

from ecb_rates.db.base_backend import BackendStrategy
from ecb_rates.exceptions import NotFoundError, QueryError, StoreError
from ecb_rates.ingestion.models import AggregateStat, RateRecord
from ecb_rates.utils.dates import normalise_rate_date


class RateQueries:
    """Stateless façade; every call reads the current store contents."""

    def __init__(self, backend: BackendStrategy) -> None:
        self.backend = backend

    def latest(self) -> RateRecord:
        record = self.backend.latest()
        if record is None:
            raise NotFoundError("No rates have been stored yet")
        return record

    def by_date(self, rate_date: str | date) -> RateRecord:
        key = normalise_rate_date(rate_date)
        record = self.backend.find_by_date(key)
        if record is None:
            raise NotFoundError(f"No rates stored for {key}")
        return record

    def all(self) -> list[RateRecord]:
        return self.backend.fetch_all()

    def analyze(self) -> list[AggregateStat]:
        """Return min/max/avg per currency across every stored record.

        The grouping runs inside the store. Failures surface as
        :class:`QueryError` and no partial result is returned.
        """

        try:
            return self.backend.aggregate()
        except QueryError:
            raise
        except StoreError as exc:
            raise QueryError(str(exc)) from exc


__all__ = ["RateQueries"]
