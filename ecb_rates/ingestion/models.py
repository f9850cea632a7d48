"""Data models shared across ingestion, storage and query modules."""

from __future__ import annotations

from dataclasses import dataclass, field

BASE_CURRENCY = "EUR"


@dataclass(slots=True, frozen=True)
class CurrencyQuote:
    """A single rate, quoted as units of ``currency`` per 1 EUR."""

    currency: str
    rate: float


@dataclass(slots=True)
class RateRecord:
    """All quotes published for one rate date.

    ``identity`` is assigned by the store on first insertion and is ``None``
    on candidates produced by the feed parser.
    """

    rate_date: str
    quotes: list[CurrencyQuote] = field(default_factory=list)
    identity: str | None = None

    @property
    def rates(self) -> dict[str, float]:
        return {quote.currency: quote.rate for quote in self.quotes}


@dataclass(slots=True, frozen=True)
class AggregateStat:
    """Min/max/average of one currency across every stored record."""

    currency: str
    min: float
    max: float
    avg: float

    def as_dict(self) -> dict[str, float]:
        return {"min": self.min, "max": self.max, "avg": self.avg}


__all__ = ["BASE_CURRENCY", "CurrencyQuote", "RateRecord", "AggregateStat"]
