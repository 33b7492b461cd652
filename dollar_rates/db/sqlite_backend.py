"""SQLite backend strategy implementation."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from dollar_rates.db import DEFAULT_SQLITE_DB_PATH
from dollar_rates.db.base_backend import BackendStrategy
from dollar_rates.db.sqlite_manager import PersistenceResult, SQLiteManager
from dollar_rates.ingestion.models import BankRate, BankRateLogEntry


class SQLiteBackend(BackendStrategy):
    """Backend strategy that stores rates in the bundled SQLite database."""

    def __init__(
        self,
        db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
        *,
        manager: SQLiteManager | None = None,
    ) -> None:
        self.manager = manager or SQLiteManager(db_path)
        self.db_path = Path(self.manager.db_path)

    def ensure_schema(self) -> None:
        # ``SQLiteManager`` creates the schema in its constructor.
        return None

    def upsert_latest(
        self, bank_class: str, bank_name: str, buy: float, sell: float, now: datetime
    ) -> PersistenceResult:
        return self.manager.upsert_latest(bank_class, bank_name, buy, sell, now)

    def append_log(
        self, bank_class: str, bank_name: str, buy: float, sell: float, now: datetime
    ) -> PersistenceResult:
        return self.manager.append_log(bank_class, bank_name, buy, sell, now)

    def get_latest(self, bank_class: str) -> BankRate | None:
        return self.manager.get_latest(bank_class)

    def list_latest(self) -> list[BankRate]:
        return self.manager.list_latest()

    def fetch_log(self, bank_class: str | None = None) -> list[BankRateLogEntry]:
        return self.manager.fetch_log(bank_class)

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.manager.close()


__all__ = ["SQLiteBackend"]
