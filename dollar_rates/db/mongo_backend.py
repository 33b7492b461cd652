"""MongoDB backend strategy."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConfigurationError, PyMongoError

from dollar_rates.db.base_backend import BackendStrategy
from dollar_rates.db.sqlite_manager import PersistenceResult
from dollar_rates.ingestion.errors import StorageError, WriteError
from dollar_rates.ingestion.models import BankRate, BankRateLogEntry
from dollar_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


class MongoBackend(BackendStrategy):
    """Backend strategy that persists bank rates inside MongoDB."""

    def __init__(self, url: str, *, database: str | None = None) -> None:
        self.url = url
        self._client = MongoClient(url)
        if database is not None:
            db = self._client[database]
        else:
            try:
                db = self._client.get_default_database()
            except ConfigurationError as exc:
                raise ValueError("MongoDB connection URI must include a database name") from exc
        self._latest_collection: Collection = db["bank_rates"]
        self._log_collection: Collection = db["bank_rates_log"]

    def ensure_schema(self) -> None:
        try:
            LOGGER.info("Ensuring MongoDB bank rate collections exist")
            self._client.admin.command("ping")
            self._latest_collection.create_index([("bank_class", ASCENDING)], unique=True)
            self._log_collection.create_index([("bank_class", ASCENDING), ("created_at", ASCENDING)])
        except PyMongoError as exc:  # pragma: no cover - error path
            raise StorageError(f"Failed to ensure MongoDB schema: {exc}") from exc

    def upsert_latest(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        try:
            outcome = self._latest_collection.update_one(
                {"bank_class": bank_class},
                {
                    "$set": {
                        "bank_name": bank_name,
                        "dollar_buy_rate": buy,
                        "dollar_sell_rate": sell,
                        "updated_at": now,
                    },
                    "$setOnInsert": {"created_at": now},
                },
                upsert=True,
            )
        except PyMongoError as exc:
            raise WriteError(f"Failed to upsert {bank_class}: {exc}") from exc
        if outcome.upserted_id is not None:
            return PersistenceResult(inserted=1)
        return PersistenceResult(updated=1)

    def append_log(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        try:
            self._log_collection.insert_one(
                {
                    "bank_class": bank_class,
                    "bank_name": bank_name,
                    "dollar_buy_rate": buy,
                    "dollar_sell_rate": sell,
                    "created_at": now,
                }
            )
        except PyMongoError as exc:
            raise WriteError(f"Failed to log {bank_class}: {exc}") from exc
        return PersistenceResult(inserted=1)

    def get_latest(self, bank_class: str) -> BankRate | None:
        try:
            doc = self._latest_collection.find_one({"bank_class": bank_class})
        except PyMongoError as exc:  # pragma: no cover - error path
            raise StorageError(f"Failed to read {bank_class}: {exc}") from exc
        return _bank_rate_from_doc(doc) if doc is not None else None

    def list_latest(self) -> list[BankRate]:
        try:
            docs = self._latest_collection.find({}).sort("bank_class", ASCENDING)
            return [_bank_rate_from_doc(doc) for doc in docs]
        except PyMongoError as exc:  # pragma: no cover - error path
            raise StorageError(f"Failed to list bank rates: {exc}") from exc

    def fetch_log(self, bank_class: str | None = None) -> list[BankRateLogEntry]:
        query: dict[str, Any] = {}
        if bank_class is not None:
            query["bank_class"] = bank_class
        try:
            docs = self._log_collection.find(query).sort(
                [("created_at", ASCENDING), ("_id", ASCENDING)]
            )
            return [
                BankRateLogEntry(
                    bank_class=doc["bank_class"],
                    bank_name=doc["bank_name"],
                    dollar_buy_rate=float(doc["dollar_buy_rate"]),
                    dollar_sell_rate=float(doc["dollar_sell_rate"]),
                    created_at=doc.get("created_at"),
                )
                for doc in docs
            ]
        except PyMongoError as exc:  # pragma: no cover - error path
            raise StorageError(f"Failed to read rate log: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial cleanup
        self._client.close()


def _bank_rate_from_doc(doc: dict[str, Any]) -> BankRate:
    return BankRate(
        bank_class=doc["bank_class"],
        bank_name=doc["bank_name"],
        dollar_buy_rate=float(doc["dollar_buy_rate"]),
        dollar_sell_rate=float(doc["dollar_sell_rate"]),
        updated_at=doc.get("updated_at"),
        created_at=doc.get("created_at"),
    )


__all__ = ["MongoBackend"]
