"""Shared logic for SQL (Postgres/MySQL) backends."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, bindparam, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from dollar_rates.db.base_backend import BackendStrategy
from dollar_rates.db.sqlite_manager import PersistenceResult
from dollar_rates.db.tables import Base
from dollar_rates.ingestion.errors import StorageError, WriteError
from dollar_rates.ingestion.models import BankRate, BankRateLogEntry
from dollar_rates.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from sqlalchemy.engine import Connection, Engine

LOGGER = get_logger(__name__)

UPDATE_LATEST_SQL = """
UPDATE bank_rates
SET bank_name = :bank_name,
    dollar_buy_rate = :buy,
    dollar_sell_rate = :sell,
    updated_at = :now
WHERE bank_class = :bank_class
"""
INSERT_LATEST_SQL = """
INSERT INTO bank_rates(bank_name, bank_class, dollar_buy_rate, dollar_sell_rate, updated_at, created_at)
VALUES(:bank_name, :bank_class, :buy, :sell, :now, :now)
"""
INSERT_LOG_SQL = """
INSERT INTO bank_rates_log(bank_name, bank_class, dollar_buy_rate, dollar_sell_rate, created_at)
VALUES(:bank_name, :bank_class, :buy, :sell, :now)
"""
SELECT_LATEST_SQL = (
    "SELECT id, bank_name, bank_class, dollar_buy_rate, dollar_sell_rate, updated_at, created_at "
    "FROM bank_rates"
)
SELECT_LOG_SQL = (
    "SELECT id, bank_name, bank_class, dollar_buy_rate, dollar_sell_rate, created_at "
    "FROM bank_rates_log"
)


def write_statement(sql: str) -> TextClause:
    return text(sql).bindparams(bindparam("now", type_=DateTime(timezone=True)))


class RelationalBackend(BackendStrategy):
    """Base class that encapsulates SQLAlchemy powered interactions."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine_instance: Engine | None = None

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True, pool_pre_ping=True)
        return self._engine_instance

    def ensure_schema(self) -> None:
        engine = self._get_engine()
        with engine.begin() as connection:
            LOGGER.info("Ensuring bank_rates schema exists")
            connection.execute(text("SELECT 1"))
            Base.metadata.create_all(connection)

    def upsert_latest(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        params = {
            "bank_class": bank_class,
            "bank_name": bank_name,
            "buy": buy,
            "sell": sell,
            "now": now,
        }
        try:
            with self._get_engine().begin() as connection:
                return self._upsert(connection, params)
        except SQLAlchemyError as exc:
            raise WriteError(f"Failed to upsert {bank_class}: {exc}") from exc

    def _upsert(self, connection: Connection, params: dict[str, Any]) -> PersistenceResult:
        """Portable upsert: UPDATE first, INSERT when no row matched.

        Dialects with a native single-statement upsert override this.
        """

        result = PersistenceResult()
        updated = connection.execute(write_statement(UPDATE_LATEST_SQL), params).rowcount
        if updated:
            result.updated += updated
        else:
            connection.execute(write_statement(INSERT_LATEST_SQL), params)
            result.inserted += 1
        return result

    def append_log(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        params = {
            "bank_class": bank_class,
            "bank_name": bank_name,
            "buy": buy,
            "sell": sell,
            "now": now,
        }
        try:
            with self._get_engine().begin() as connection:
                connection.execute(write_statement(INSERT_LOG_SQL), params)
        except SQLAlchemyError as exc:
            raise WriteError(f"Failed to log {bank_class}: {exc}") from exc
        return PersistenceResult(inserted=1)

    def _query(self, sql: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            with self._get_engine().connect() as connection:
                return [dict(row._mapping) for row in connection.execute(text(sql), params)]
        except SQLAlchemyError as exc:
            raise StorageError(f"Query failed: {exc}") from exc

    def get_latest(self, bank_class: str) -> BankRate | None:
        rows = self._query(
            f"{SELECT_LATEST_SQL} WHERE bank_class = :bank_class", {"bank_class": bank_class}
        )
        return _bank_rate_from_mapping(rows[0]) if rows else None

    def list_latest(self) -> list[BankRate]:
        rows = self._query(f"{SELECT_LATEST_SQL} ORDER BY bank_class", {})
        return [_bank_rate_from_mapping(row) for row in rows]

    def fetch_log(self, bank_class: str | None = None) -> list[BankRateLogEntry]:
        query = SELECT_LOG_SQL
        params: dict[str, Any] = {}
        if bank_class is not None:
            query += " WHERE bank_class = :bank_class"
            params["bank_class"] = bank_class
        rows = self._query(f"{query} ORDER BY created_at, id", params)
        return [
            BankRateLogEntry(
                id=row["id"],
                bank_class=row["bank_class"],
                bank_name=row["bank_name"],
                dollar_buy_rate=float(row["dollar_buy_rate"]),
                dollar_sell_rate=float(row["dollar_sell_rate"]),
                created_at=_normalise_timestamp(row["created_at"]),
            )
            for row in rows
        ]

    def close(self) -> None:  # pragma: no cover - trivial resource cleanup
        if self._engine_instance is not None:
            self._engine_instance.dispose()


def _bank_rate_from_mapping(row: dict[str, Any]) -> BankRate:
    return BankRate(
        id=row["id"],
        bank_class=row["bank_class"],
        bank_name=row["bank_name"],
        dollar_buy_rate=float(row["dollar_buy_rate"]),
        dollar_sell_rate=float(row["dollar_sell_rate"]),
        updated_at=_normalise_timestamp(row["updated_at"]),
        created_at=_normalise_timestamp(row["created_at"]),
    )


def _normalise_timestamp(value: object) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


__all__ = ["RelationalBackend", "INSERT_LATEST_SQL", "write_statement"]
