"""Read API served by FastAPI."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from dollar_rates.api import create_app
from dollar_rates.db.sqlite_backend import SQLiteBackend
from dollar_rates.ingestion.errors import StorageError
from dollar_rates.scheduler import RateUpdater

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_health(sqlite_backend: SQLiteBackend) -> None:
    client = TestClient(create_app(sqlite_backend))

    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "dollar-rates"}


def test_rates_lists_latest_values_by_bank_class(sqlite_backend: SQLiteBackend) -> None:
    sqlite_backend.upsert_latest("popular", "Banco Popular", 58.54, 59.02, T0)
    sqlite_backend.upsert_latest("bhd", "BHD", 60.05, 61.20, T0)
    client = TestClient(create_app(sqlite_backend))

    payload = client.get("/rates").json()

    assert payload["success"] is True
    assert [row["bank_class"] for row in payload["data"]] == ["bhd", "popular"]
    assert payload["data"][0]["dollar_buy_rate"] == 60.05
    assert payload["data"][0]["updated_at"].startswith("2024-06-01T12:00:00")


def test_rate_by_bank(sqlite_backend: SQLiteBackend) -> None:
    sqlite_backend.upsert_latest("bhd", "BHD", 60.05, 61.20, T0)
    client = TestClient(create_app(sqlite_backend))

    found = client.get("/rates/bhd").json()
    missing = client.get("/rates/scotiabank").json()

    assert found["success"] is True
    assert found["data"]["bank_name"] == "BHD"
    assert missing == {"success": False, "message": "Bank 'scotiabank' not found"}


class _BrokenBackend(SQLiteBackend):
    def list_latest(self):
        raise StorageError("database is locked")

    def get_latest(self, bank_class: str):
        raise StorageError("database is locked")


def test_storage_errors_are_reported_in_body(tmp_path) -> None:
    backend = _BrokenBackend(db_path=tmp_path / "broken.db")
    client = TestClient(create_app(backend))

    assert client.get("/rates").json() == {"success": False, "error": "database is locked"}
    assert client.get("/rates/bhd").json() == {"success": False, "error": "database is locked"}
    backend.close()


def test_lifespan_starts_and_stops_updater(sqlite_backend: SQLiteBackend) -> None:
    ran = threading.Event()
    updater = RateUpdater(ran.set, interval_minutes=60)

    with TestClient(create_app(sqlite_backend, updater=updater)) as client:
        assert client.get("/").status_code == 200
        assert ran.wait(timeout=5)
        assert updater.running

    assert not updater.running
