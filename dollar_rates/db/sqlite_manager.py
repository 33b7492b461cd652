"""Persistence helpers for the bundled SQLite database (SQLAlchemy ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, cast

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dollar_rates.db import DEFAULT_SQLITE_DB_PATH
from dollar_rates.db.tables import Base, BankRateLogRow, BankRateRow
from dollar_rates.ingestion.errors import StorageError, WriteError
from dollar_rates.ingestion.models import BankRate, BankRateLogEntry
from dollar_rates.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from sqlalchemy.engine import Engine

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class PersistenceResult:
    """Represents how many rows were inserted or updated by a write."""

    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        """Return the total number of affected rows."""

        return self.inserted + self.updated


def _to_bank_rate(row: BankRateRow) -> BankRate:
    return BankRate(
        id=cast(int, row.id),
        bank_class=cast(str, row.bank_class),
        bank_name=cast(str, row.bank_name),
        dollar_buy_rate=cast(float, row.dollar_buy_rate),
        dollar_sell_rate=cast(float, row.dollar_sell_rate),
        updated_at=cast(datetime, row.updated_at),
        created_at=cast(datetime, row.created_at),
    )


def _to_log_entry(row: BankRateLogRow) -> BankRateLogEntry:
    return BankRateLogEntry(
        id=cast(int, row.id),
        bank_class=cast(str, row.bank_class),
        bank_name=cast(str, row.bank_name),
        dollar_buy_rate=cast(float, row.dollar_buy_rate),
        dollar_sell_rate=cast(float, row.dollar_sell_rate),
        created_at=cast(datetime, row.created_at),
    )


class SQLiteManager:
    """ORM-backed store for the latest-value table and the rate log.

    Every public call opens its own session, so concurrent writers from the
    coordinator's worker threads never share a connection.
    """

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(self.engine)
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )

    def upsert_latest(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        result = PersistenceResult()
        try:
            with self._SessionFactory() as session:
                existing = session.scalars(
                    select(BankRateRow).where(BankRateRow.bank_class == bank_class)
                ).first()
                if existing is None:
                    session.add(
                        BankRateRow(
                            bank_class=bank_class,
                            bank_name=bank_name,
                            dollar_buy_rate=buy,
                            dollar_sell_rate=sell,
                            updated_at=now,
                            created_at=now,
                        )
                    )
                    result.inserted += 1
                else:
                    setattr(existing, "bank_name", bank_name)
                    setattr(existing, "dollar_buy_rate", buy)
                    setattr(existing, "dollar_sell_rate", sell)
                    setattr(existing, "updated_at", now)
                    result.updated += 1
                session.commit()
        except SQLAlchemyError as exc:
            raise WriteError(f"Failed to upsert {bank_class}: {exc}") from exc
        return result

    def append_log(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        try:
            with self._SessionFactory() as session:
                session.add(
                    BankRateLogRow(
                        bank_class=bank_class,
                        bank_name=bank_name,
                        dollar_buy_rate=buy,
                        dollar_sell_rate=sell,
                        created_at=now,
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise WriteError(f"Failed to log {bank_class}: {exc}") from exc
        return PersistenceResult(inserted=1)

    def get_latest(self, bank_class: str) -> BankRate | None:
        try:
            with self._SessionFactory() as session:
                row = session.scalars(
                    select(BankRateRow).where(BankRateRow.bank_class == bank_class)
                ).first()
                return _to_bank_rate(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read {bank_class}: {exc}") from exc

    def list_latest(self) -> list[BankRate]:
        try:
            with self._SessionFactory() as session:
                rows = session.scalars(select(BankRateRow).order_by(BankRateRow.bank_class))
                return [_to_bank_rate(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list bank rates: {exc}") from exc

    def fetch_log(self, bank_class: str | None = None) -> list[BankRateLogEntry]:
        stmt = select(BankRateLogRow).order_by(BankRateLogRow.created_at, BankRateLogRow.id)
        if bank_class is not None:
            stmt = stmt.where(BankRateLogRow.bank_class == bank_class)
        try:
            with self._SessionFactory() as session:
                return [_to_log_entry(row) for row in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read rate log: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial
        self.engine.dispose()

    def __enter__(self) -> "SQLiteManager":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["PersistenceResult", "SQLiteManager"]
