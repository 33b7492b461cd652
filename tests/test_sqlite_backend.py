from __future__ import annotations

from datetime import datetime, timezone

from dollar_rates.db.sqlite_backend import SQLiteBackend
from dollar_rates.db.sqlite_manager import PersistenceResult, SQLiteManager

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_sqlite_backend_roundtrip(tmp_path) -> None:
    backend = SQLiteBackend(db_path=tmp_path / "sqlite_backend.db")
    assert backend.ensure_schema() is None

    result = backend.upsert_latest("popular", "Banco Popular", 58.54, 59.02, T0)
    assert result.inserted == 1
    backend.append_log("popular", "Banco Popular", 58.54, 59.02, T0)

    fetched = backend.list_latest()
    assert len(fetched) == 1
    assert fetched[0].bank_name == "Banco Popular"
    assert fetched[0].to_dict()["dollar_sell_rate"] == 59.02
    assert len(backend.fetch_log()) == 1

    backend.close()


def test_sqlite_backend_shares_manager(tmp_path) -> None:
    manager = SQLiteManager(tmp_path / "shared.db")
    backend = SQLiteBackend(manager=manager)

    assert backend.db_path == manager.db_path
    manager.upsert_latest("bhd", "BHD", 60.0, 61.0, T0)
    assert backend.get_latest("bhd") is not None

    backend.close()


def test_persistence_result_total() -> None:
    assert PersistenceResult(inserted=1, updated=2).total == 3
