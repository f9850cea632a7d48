"""Error taxonomy shared by the ingestion pipeline, the stores and the API."""

from __future__ import annotations

__all__ = [
    "EcbRatesError",
    "FetchError",
    "ParseError",
    "StoreError",
    "QueryError",
    "NotFoundError",
]


class EcbRatesError(Exception):
    """Base class for every error raised by :mod:`ecb_rates`."""


class FetchError(EcbRatesError):
    """The reference-rate feed could not be retrieved."""


class ParseError(EcbRatesError, ValueError):
    """The feed payload is not a well-formed reference-rate document."""


class StoreError(EcbRatesError):
    """The persistence layer failed to connect, read or write."""


class QueryError(StoreError):
    """The store could not execute an aggregation query."""


class NotFoundError(EcbRatesError, LookupError):
    """No stored record matches the requested date (or the store is empty)."""
