"""Mongo backend tests that monkeypatch pymongo primitives."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest
from pymongo.errors import ConfigurationError

from dollar_rates.db import mongo_backend as mongo_module
from dollar_rates.ingestion.errors import WriteError

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class _DummyCursor:
    def __init__(self, docs: List[Dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key_or_list: Any, direction: int = 1) -> List[Dict[str, Any]]:
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        docs = list(self._docs)
        for field, order in reversed(keys):
            docs.sort(key=lambda doc: doc[field], reverse=order == -1)
        return docs


class _DummyUpdateResult:
    def __init__(self, upserted_id: object | None) -> None:
        self.upserted_id = upserted_id


class _DummyCollection:
    def __init__(self) -> None:
        self.docs: List[Dict[str, Any]] = []
        self.indexes: list[tuple[tuple[tuple[str, int], ...], bool]] = []
        self.fail_writes = False

    def create_index(self, fields: list[tuple[str, int]], unique: bool = False) -> None:
        self.indexes.append((tuple(fields), unique))

    def _matches(self, doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
        return all(doc.get(key) == value for key, value in query.items())

    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any], *, upsert: bool):
        assert upsert is True
        if self.fail_writes:
            raise RuntimeError("primary unavailable")
        for doc in self.docs:
            if self._matches(doc, filter):
                doc.update(update["$set"])
                return _DummyUpdateResult(None)
        doc = {**filter, **update["$set"], **update.get("$setOnInsert", {})}
        self.docs.append(doc)
        return _DummyUpdateResult(len(self.docs))

    def insert_one(self, doc: Dict[str, Any]) -> None:
        if self.fail_writes:
            raise RuntimeError("primary unavailable")
        self.docs.append({"_id": len(self.docs) + 1, **doc})

    def find_one(self, query: Dict[str, Any]) -> Dict[str, Any] | None:
        return next((doc for doc in self.docs if self._matches(doc, query)), None)

    def find(self, query: Dict[str, Any]) -> _DummyCursor:
        # Natural order is unspecified; hand documents back newest first.
        return _DummyCursor([doc for doc in reversed(self.docs) if self._matches(doc, query)])


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

    def __getitem__(self, name: str) -> _DummyDatabase:
        return self.databases.setdefault(name, _DummyDatabase())

    def get_default_database(self) -> _DummyDatabase:
        return self.__getitem__("default")

    def command(self, name: str) -> None:
        assert name == "ping"

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def patch_mongo_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(mongo_module, "MongoClient", _DummyClient)
    monkeypatch.setattr(mongo_module, "PyMongoError", RuntimeError)


def test_mongo_backend_roundtrip() -> None:
    backend = mongo_module.MongoBackend("mongodb://example.com/", database="rates")
    backend.ensure_schema()

    first = backend.upsert_latest("bhd", "BHD", 60.0, 61.0, T0)
    backend.append_log("bhd", "BHD", 60.0, 61.0, T0)
    later = T0 + timedelta(minutes=30)
    second = backend.upsert_latest("bhd", "BHD", 60.3, 61.4, later)
    backend.append_log("bhd", "BHD", 60.3, 61.4, later)
    backend.upsert_latest("banreservas", "Banreservas", 59.9, 61.1, later)

    assert (first.inserted, second.updated) == (1, 1)
    latest = backend.get_latest("bhd")
    assert latest is not None
    assert latest.dollar_buy_rate == 60.3
    assert latest.created_at == T0
    assert latest.updated_at == later
    assert [row.bank_class for row in backend.list_latest()] == ["banreservas", "bhd"]
    assert [entry.created_at for entry in backend.fetch_log("bhd")] == [T0, later]
    assert backend.get_latest("popular") is None

    backend.close()


def test_mongo_backend_creates_unique_bank_index() -> None:
    backend = mongo_module.MongoBackend("mongodb://example.com/rates")
    backend.ensure_schema()

    assert backend._latest_collection.indexes == [((("bank_class", 1),), True)]


def test_mongo_backend_wraps_write_failures() -> None:
    backend = mongo_module.MongoBackend("mongodb://example.com/", database="rates")
    backend._latest_collection.fail_writes = True

    with pytest.raises(WriteError, match="bhd"):
        backend.upsert_latest("bhd", "BHD", 60.0, 61.0, T0)


def test_mongo_log_breaks_timestamp_ties_by_insertion_order() -> None:
    backend = mongo_module.MongoBackend("mongodb://example.com/", database="rates")
    for buy in (60.0, 60.1, 60.2):
        backend.append_log("bhd", "BHD", buy, 61.0, T0)

    assert [entry.dollar_buy_rate for entry in backend.fetch_log("bhd")] == [60.0, 60.1, 60.2]


class _NoDefaultDatabaseClient(_DummyClient):
    def get_default_database(self) -> _DummyDatabase:
        raise ConfigurationError("No default database name defined or provided.")


def test_mongo_backend_requires_a_database_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(mongo_module, "MongoClient", _NoDefaultDatabaseClient)

    with pytest.raises(ValueError, match="database name"):
        mongo_module.MongoBackend("mongodb://example.com/")
