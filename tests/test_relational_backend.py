"""Relational backend integration tests using SQLite."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from dollar_rates.db.relational_backend import RelationalBackend, _normalise_timestamp
from dollar_rates.ingestion.errors import StorageError, WriteError

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_relational_backend_roundtrip(tmp_path: Path) -> None:
    backend = RelationalBackend(f"sqlite:///{tmp_path / 'relational.db'}")
    backend.ensure_schema()

    first = backend.upsert_latest("bhd", "BHD", 60.0, 61.0, T0)
    assert (first.inserted, first.updated) == (1, 0)
    backend.append_log("bhd", "BHD", 60.0, 61.0, T0)

    later = T0 + timedelta(minutes=30)
    second = backend.upsert_latest("bhd", "BHD", 60.2, 61.3, later)
    assert (second.inserted, second.updated) == (0, 1)
    backend.append_log("bhd", "BHD", 60.2, 61.3, later)
    backend.upsert_latest("banreservas", "Banreservas", 59.9, 61.1, later)

    latest = backend.get_latest("bhd")
    assert latest is not None
    assert latest.dollar_buy_rate == 60.2
    assert latest.created_at is not None and latest.updated_at is not None
    assert latest.created_at.replace(tzinfo=None) == T0.replace(tzinfo=None)
    assert latest.updated_at.replace(tzinfo=None) == later.replace(tzinfo=None)
    assert [row.bank_class for row in backend.list_latest()] == ["banreservas", "bhd"]
    assert [entry.dollar_buy_rate for entry in backend.fetch_log("bhd")] == [60.0, 60.2]
    assert backend.fetch_log("banreservas") == []
    assert backend.get_latest("popular") is None

    backend.close()


def test_relational_backend_wraps_storage_errors(tmp_path: Path) -> None:
    backend = RelationalBackend(f"sqlite:///{tmp_path / 'no_schema.db'}")

    with pytest.raises(WriteError):
        backend.upsert_latest("bhd", "BHD", 60.0, 61.0, T0)
    with pytest.raises(StorageError):
        backend.list_latest()

    backend.close()


def test_normalise_timestamp_handles_multiple_input_types() -> None:
    assert _normalise_timestamp(None) is None
    assert _normalise_timestamp(T0) is T0
    assert _normalise_timestamp("2024-06-01 12:00:00+00:00") == T0
