"""PostgreSQL backend strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dollar_rates.db.relational_backend import INSERT_LATEST_SQL, RelationalBackend, write_statement
from dollar_rates.db.sqlite_manager import PersistenceResult

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from sqlalchemy.engine import Connection

# ``xmax`` is zero only for a freshly inserted tuple.
UPSERT_LATEST_SQL = (
    INSERT_LATEST_SQL.rstrip()
    + """
ON CONFLICT (bank_class) DO UPDATE
SET bank_name = EXCLUDED.bank_name,
    dollar_buy_rate = EXCLUDED.dollar_buy_rate,
    dollar_sell_rate = EXCLUDED.dollar_sell_rate,
    updated_at = EXCLUDED.updated_at
RETURNING (xmax = 0) AS inserted
"""
)


class PostgresBackend(RelationalBackend):
    """Relational backend using ``INSERT ... ON CONFLICT`` for the latest table."""

    def _upsert(self, connection: Connection, params: dict[str, Any]) -> PersistenceResult:
        inserted = connection.execute(write_statement(UPSERT_LATEST_SQL), params).scalar()
        if inserted:
            return PersistenceResult(inserted=1)
        return PersistenceResult(updated=1)


__all__ = ["PostgresBackend", "UPSERT_LATEST_SQL"]
