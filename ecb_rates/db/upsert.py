"""Date-keyed upsert of parsed rate records."""

from __future__ import annotations

import dataclasses
from typing import Iterable

from ecb_rates.db.base_backend import BackendStrategy, PersistenceResult
from ecb_rates.exceptions import StoreError
from ecb_rates.ingestion.models import RateRecord
from ecb_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


class RateUpserter:
    """Insert a record for an unseen date, otherwise replace it in place.

    Lookup and write are two separate store calls, so concurrent saves of the
    same date can race into a duplicate insert. Callers serialise ``save``.
    """

    def __init__(self, backend: BackendStrategy) -> None:
        self.backend = backend

    def save(self, candidate: RateRecord) -> RateRecord:
        """Persist ``candidate`` and return it carrying its stored identity.

        A :class:`~ecb_rates.exceptions.StoreError` raised by the lookup is
        propagated; only a lookup that finds nothing leads to an insert.
        """

        record, _ = self._upsert(candidate)
        return record

    def save_all(self, candidates: Iterable[RateRecord]) -> PersistenceResult:
        """Save ``candidates`` one at a time and count inserts vs. replacements."""

        result = PersistenceResult()
        for candidate in candidates:
            _, inserted = self._upsert(candidate)
            if inserted:
                result.inserted += 1
            else:
                result.updated += 1
        return result

    def _upsert(self, candidate: RateRecord) -> tuple[RateRecord, bool]:
        existing = self.backend.find_by_date(candidate.rate_date)
        if existing is None:
            identity = self.backend.insert(candidate)
            LOGGER.debug("Inserted rates for %s as %s", candidate.rate_date, identity)
            return dataclasses.replace(candidate, identity=identity), True
        if existing.identity is None:
            raise StoreError(f"Stored rates for {candidate.rate_date} have no identity")
        self.backend.replace(existing.identity, candidate)
        LOGGER.debug("Replaced rates for %s (%s)", candidate.rate_date, existing.identity)
        return dataclasses.replace(candidate, identity=existing.identity), False


__all__ = ["RateUpserter"]
