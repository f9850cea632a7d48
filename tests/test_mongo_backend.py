"""Mongo backend tests that monkeypatch pymongo primitives."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
from bson import ObjectId

from ecb_rates.db import mongo_backend as mongo_module
from ecb_rates.db.upsert import RateUpserter
from ecb_rates.exceptions import QueryError, StoreError
from ecb_rates.ingestion.models import AggregateStat, CurrencyQuote, RateRecord


class _DummyCursor:
    def __init__(self, docs: List[Dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, field: str, direction: int) -> List[Dict[str, Any]]:
        return sorted(self._docs, key=lambda doc: doc[field], reverse=direction == -1)


class _InsertResult:
    def __init__(self, inserted_id: ObjectId) -> None:
        self.inserted_id = inserted_id


class _ReplaceResult:
    def __init__(self, matched_count: int) -> None:
        self.matched_count = matched_count


class _DummyCollection:
    def __init__(self) -> None:
        self.docs: Dict[ObjectId, Dict[str, Any]] = {}
        self.indexes: list[tuple[tuple[tuple[str, int], ...], bool]] = []
        self.pipelines: list[list[Dict[str, Any]]] = []
        self.fail_with: Exception | None = None

    def __bool__(self) -> bool:  # pragma: no cover - behavioural parity with pymongo
        raise NotImplementedError("Collection truthiness is undefined")

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def create_index(self, fields: list[tuple[str, int]], unique: bool) -> None:
        self.indexes.append((tuple(fields), unique))

    def find_one(self, query: Dict[str, Any], sort: list[tuple[str, int]] | None = None):
        self._maybe_fail()
        docs = [
            doc for doc in self.docs.values() if all(doc.get(k) == v for k, v in query.items())
        ]
        if sort:
            field, direction = sort[0]
            docs = sorted(docs, key=lambda doc: doc[field], reverse=direction == -1)
        return dict(docs[0]) if docs else None

    def insert_one(self, doc: Dict[str, Any]) -> _InsertResult:
        self._maybe_fail()
        doc.setdefault("_id", ObjectId())
        self.docs[doc["_id"]] = dict(doc)
        return _InsertResult(doc["_id"])

    def replace_one(self, query: Dict[str, Any], doc: Dict[str, Any]) -> _ReplaceResult:
        self._maybe_fail()
        object_id = query["_id"]
        if object_id not in self.docs:
            return _ReplaceResult(0)
        assert "_id" not in doc
        self.docs[object_id] = {"_id": object_id, **doc}
        return _ReplaceResult(1)

    def find(self, query: Dict[str, Any]) -> _DummyCursor:
        self._maybe_fail()
        assert query == {}
        return _DummyCursor([dict(doc) for doc in self.docs.values()])

    def aggregate(self, pipeline: list[Dict[str, Any]]) -> list[Dict[str, Any]]:
        self._maybe_fail()
        self.pipelines.append(pipeline)
        groups: Dict[str, list[float]] = {}
        for doc in self.docs.values():
            for item in doc["rates"]:
                groups.setdefault(item["currency"], []).append(item["rate"])
        return [
            {
                "_id": currency,
                "min": min(values),
                "max": max(values),
                "sum": sum(values),
                "avg": sum(values) / len(values),
            }
            for currency, values in sorted(groups.items())
        ]


class _DummyDatabase(dict):
    def __getitem__(self, name: str) -> _DummyCollection:  # type: ignore[override]
        if name not in self:
            self[name] = _DummyCollection()
        return dict.__getitem__(self, name)


class _DummyClient:
    def __init__(self, url: str) -> None:
        self.url = url
        self.admin = self
        self.closed = False
        self.databases: Dict[str, _DummyDatabase] = {}
        self.ping_error: Exception | None = None

    def __getitem__(self, name: str) -> _DummyDatabase:
        return self.databases.setdefault(name, _DummyDatabase())

    def get_default_database(self, default: str | None = None) -> _DummyDatabase:
        return self.__getitem__(default or "default")

    def command(self, name: str) -> None:
        assert name == "ping"
        if self.ping_error is not None:
            raise self.ping_error

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def patch_mongo_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(mongo_module, "MongoClient", _DummyClient)
    monkeypatch.setattr(mongo_module, "PyMongoError", RuntimeError)


@pytest.fixture
def backend() -> mongo_module.MongoBackend:
    instance = mongo_module.MongoBackend("mongodb://example.com/", database="currencydb")
    instance.ensure_schema()
    return instance


def _collection(backend: mongo_module.MongoBackend) -> _DummyCollection:
    return backend._collection  # type: ignore[return-value]


def _record(rate_date: str, **rates: float) -> RateRecord:
    return RateRecord(
        rate_date=rate_date,
        quotes=[CurrencyQuote(currency=code, rate=rate) for code, rate in rates.items()],
    )


def test_ensure_schema_creates_unique_date_index(backend: mongo_module.MongoBackend) -> None:
    assert _collection(backend).indexes == [((("rate_date", 1),), True)]


def test_default_database_is_used_without_explicit_name() -> None:
    instance = mongo_module.MongoBackend("mongodb://example.com/")

    assert instance._client.databases.keys() == {"currencydb"}  # type: ignore[attr-defined]


def test_insert_stores_one_document_per_date(backend: mongo_module.MongoBackend) -> None:
    identity = backend.insert(_record("2024-01-02", USD=1.0956, JPY=155.74))

    (doc,) = _collection(backend).docs.values()
    assert str(doc["_id"]) == identity
    assert doc["rate_date"] == "2024-01-02"
    assert doc["rates"] == [
        {"currency": "USD", "rate": 1.0956},
        {"currency": "JPY", "rate": 155.74},
    ]


def test_upsert_roundtrip_preserves_identity(backend: mongo_module.MongoBackend) -> None:
    upserter = RateUpserter(backend)
    first = upserter.save(_record("2024-01-02", USD=1.0956))
    second = upserter.save(_record("2024-01-02", USD=1.2, GBP=0.86))

    stored = backend.find_by_date("2024-01-02")
    assert first.identity == second.identity == stored.identity
    assert stored.rates == {"USD": 1.2, "GBP": 0.86}
    assert len(_collection(backend).docs) == 1


def test_replace_rejects_malformed_identity(backend: mongo_module.MongoBackend) -> None:
    with pytest.raises(StoreError, match="Malformed"):
        backend.replace("not-an-object-id", _record("2024-01-02", USD=1.1))


def test_replace_requires_existing_document(backend: mongo_module.MongoBackend) -> None:
    with pytest.raises(StoreError, match="No MongoDB rates document"):
        backend.replace(str(ObjectId()), _record("2024-01-02", USD=1.1))


def test_latest_and_fetch_all_sort_by_date(backend: mongo_module.MongoBackend) -> None:
    for rate_date in ("2024-01-01", "2024-01-03", "2024-01-02"):
        backend.insert(_record(rate_date, USD=1.0))

    assert backend.latest().rate_date == "2024-01-03"
    assert [record.rate_date for record in backend.fetch_all()] == [
        "2024-01-01",
        "2024-01-02",
        "2024-01-03",
    ]


def test_aggregate_runs_pipeline_in_mongo(backend: mongo_module.MongoBackend) -> None:
    backend.insert(_record("2024-01-01", USD=1.1, EUR=1.0))
    backend.insert(_record("2024-01-02", USD=1.3))

    stats = backend.aggregate()

    pipeline = _collection(backend).pipelines[0]
    assert [next(iter(stage)) for stage in pipeline] == ["$unwind", "$project", "$group", "$sort"]
    assert stats[0] == AggregateStat(currency="EUR", min=1.0, max=1.0, avg=1.0)
    assert stats[1].currency == "USD"
    assert stats[1].avg == pytest.approx(1.2)


def test_lookup_errors_become_store_errors(backend: mongo_module.MongoBackend) -> None:
    _collection(backend).fail_with = RuntimeError("not primary")

    with pytest.raises(StoreError, match="not primary"):
        backend.find_by_date("2024-01-01")


def test_aggregate_errors_become_query_errors(backend: mongo_module.MongoBackend) -> None:
    _collection(backend).fail_with = RuntimeError("$group exceeded memory limit")

    with pytest.raises(QueryError):
        backend.aggregate()


def test_ensure_schema_surfaces_connectivity_errors() -> None:
    instance = mongo_module.MongoBackend("mongodb://example.com/", database="currencydb")
    instance._client.ping_error = RuntimeError("connection refused")  # type: ignore[attr-defined]

    with pytest.raises(StoreError, match="connection refused"):
        instance.ensure_schema()
    with pytest.raises(StoreError):
        instance.ping()


def test_close_releases_client(backend: mongo_module.MongoBackend) -> None:
    backend.close()

    assert backend._client.closed is True  # type: ignore[attr-defined]


def test_invalid_client_configuration_becomes_store_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _reject(url: str) -> None:
        raise RuntimeError("The empty string is not valid username")

    monkeypatch.setattr(mongo_module, "MongoClient", _reject)

    with pytest.raises(StoreError, match="Invalid MongoDB configuration"):
        mongo_module.MongoBackend("mongodb://:@example.com/")
