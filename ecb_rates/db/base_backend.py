"""Backend strategy interfaces for ecb_rates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ecb_rates.ingestion.models import AggregateStat, RateRecord


@dataclass(slots=True)
class PersistenceResult:
    """Represents how many records were inserted or replaced in a batch."""

    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        """Return the total number of affected records."""

        return self.inserted + self.updated


class BackendStrategy(ABC):
    """Common interface implemented by every store.

    Implementations translate driver failures into
    :class:`~ecb_rates.exceptions.StoreError` (or
    :class:`~ecb_rates.exceptions.QueryError` for :meth:`aggregate`).
    """

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create required tables/collections and verify connectivity."""

    @abstractmethod
    def find_by_date(self, rate_date: str) -> RateRecord | None:
        """Return the record stored for ``rate_date`` or ``None`` when absent."""

    @abstractmethod
    def insert(self, record: RateRecord) -> str:
        """Insert ``record`` as a new document and return its assigned identity."""

    @abstractmethod
    def replace(self, identity: str, record: RateRecord) -> None:
        """Overwrite the document stored under ``identity`` with ``record``."""

    @abstractmethod
    def latest(self) -> RateRecord | None:
        """Return the record with the greatest rate date, if any."""

    @abstractmethod
    def fetch_all(self) -> list[RateRecord]:
        """Return every stored record ordered by rate date."""

    @abstractmethod
    def aggregate(self) -> list[AggregateStat]:
        """Return per-currency min/max/avg ordered by currency code."""

    def ping(self) -> None:
        """Verify connectivity; stores without a remote server have nothing to do."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["BackendStrategy", "PersistenceResult"]
