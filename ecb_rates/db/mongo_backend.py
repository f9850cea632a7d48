"""MongoDB backend strategy."""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ecb_rates.db.base_backend import BackendStrategy
from ecb_rates.exceptions import QueryError, StoreError
from ecb_rates.ingestion.models import AggregateStat, CurrencyQuote, RateRecord
from ecb_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_DATABASE = "currencydb"
DEFAULT_COLLECTION = "rates"

# unwind -> project -> group -> sort, one output document per currency.
ANALYZE_PIPELINE: list[dict[str, Any]] = [
    {"$unwind": "$rates"},
    {
        "$project": {
            "_id": 1,
            "rate_date": 1,
            "currency": "$rates.currency",
            "rate": "$rates.rate",
        }
    },
    {
        "$group": {
            "_id": "$currency",
            "max": {"$max": "$rate"},
            "min": {"$min": "$rate"},
            "sum": {"$sum": "$rate"},
            "avg": {"$avg": "$rate"},
        }
    },
    {"$sort": {"_id": 1}},
]


class MongoBackend(BackendStrategy):
    """Backend strategy that persists one document per rate date inside MongoDB."""

    def __init__(
        self,
        url: str,
        *,
        database: str | None = None,
        collection: str = DEFAULT_COLLECTION,
    ) -> None:
        self.url = url
        try:
            self._client = MongoClient(url)
            if database is None:
                db = self._client.get_default_database(default=DEFAULT_DATABASE)
            else:
                db = self._client[database]
        except PyMongoError as exc:
            raise StoreError(f"Invalid MongoDB configuration: {exc}") from exc
        self._collection: Collection = db[collection]

    def ensure_schema(self) -> None:
        try:
            LOGGER.info("Ensuring MongoDB rates collection exists")
            self._client.admin.command("ping")
            self._collection.create_index([("rate_date", ASCENDING)], unique=True)
        except PyMongoError as exc:
            raise StoreError(f"Failed to ensure MongoDB schema: {exc}") from exc

    def ping(self) -> None:
        try:
            self._client.admin.command("ping")
        except PyMongoError as exc:
            raise StoreError(f"MongoDB is unreachable: {exc}") from exc

    def find_by_date(self, rate_date: str) -> RateRecord | None:
        try:
            doc = self._collection.find_one({"rate_date": rate_date})
        except PyMongoError as exc:
            raise StoreError(f"Failed to look up MongoDB rates for {rate_date}: {exc}") from exc
        return None if doc is None else _record_from_document(doc)

    def insert(self, record: RateRecord) -> str:
        doc = _document_from_record(record)
        try:
            result = self._collection.insert_one(doc)
        except PyMongoError as exc:
            raise StoreError(f"Failed to insert MongoDB rates for {record.rate_date}: {exc}") from exc
        return str(result.inserted_id)

    def replace(self, identity: str, record: RateRecord) -> None:
        try:
            object_id = ObjectId(identity)
        except (InvalidId, TypeError) as exc:
            raise StoreError(f"Malformed MongoDB identity {identity!r}") from exc
        doc = _document_from_record(record)
        try:
            result = self._collection.replace_one({"_id": object_id}, doc)
        except PyMongoError as exc:
            raise StoreError(f"Failed to replace MongoDB rates for {record.rate_date}: {exc}") from exc
        if result.matched_count == 0:
            raise StoreError(f"No MongoDB rates document with identity {identity}")

    def latest(self) -> RateRecord | None:
        try:
            doc = self._collection.find_one({}, sort=[("rate_date", DESCENDING)])
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch latest MongoDB rates: {exc}") from exc
        return None if doc is None else _record_from_document(doc)

    def fetch_all(self) -> list[RateRecord]:
        try:
            docs = list(self._collection.find({}).sort("rate_date", ASCENDING))
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch MongoDB rates: {exc}") from exc
        return [_record_from_document(doc) for doc in docs]

    def aggregate(self) -> list[AggregateStat]:
        try:
            rows = list(self._collection.aggregate(ANALYZE_PIPELINE))
        except PyMongoError as exc:
            raise QueryError(f"MongoDB aggregation failed: {exc}") from exc
        return [
            AggregateStat(
                currency=row["_id"],
                min=float(row["min"]),
                max=float(row["max"]),
                avg=float(row["avg"]),
            )
            for row in rows
        ]

    def close(self) -> None:  # pragma: no cover - trivial cleanup
        self._client.close()


def _document_from_record(record: RateRecord) -> dict[str, Any]:
    return {
        "rate_date": record.rate_date,
        "rates": [{"currency": quote.currency, "rate": quote.rate} for quote in record.quotes],
    }


def _record_from_document(doc: dict[str, Any]) -> RateRecord:
    return RateRecord(
        identity=str(doc["_id"]),
        rate_date=doc["rate_date"],
        quotes=[
            CurrencyQuote(currency=item["currency"], rate=float(item["rate"]))
            for item in doc.get("rates") or []
        ],
    )


__all__ = ["MongoBackend", "ANALYZE_PIPELINE"]
