"""MySQL backend strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dollar_rates.db.relational_backend import INSERT_LATEST_SQL, RelationalBackend, write_statement
from dollar_rates.db.sqlite_manager import PersistenceResult

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from sqlalchemy.engine import Connection

UPSERT_LATEST_SQL = (
    INSERT_LATEST_SQL.rstrip()
    + """
ON DUPLICATE KEY UPDATE
    bank_name = VALUES(bank_name),
    dollar_buy_rate = VALUES(dollar_buy_rate),
    dollar_sell_rate = VALUES(dollar_sell_rate),
    updated_at = VALUES(updated_at)
"""
)


class MySQLBackend(RelationalBackend):
    """Relational backend using ``ON DUPLICATE KEY UPDATE`` for the latest table."""

    def _upsert(self, connection: Connection, params: dict[str, Any]) -> PersistenceResult:
        # MySQL reports 1 affected row for an insert and 2 for an update.
        affected = connection.execute(write_statement(UPSERT_LATEST_SQL), params).rowcount
        if affected == 1:
            return PersistenceResult(inserted=1)
        return PersistenceResult(updated=1)


__all__ = ["MySQLBackend", "UPSERT_LATEST_SQL"]
