"""Backend strategy interfaces for dollar_rates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from dollar_rates.db.sqlite_manager import PersistenceResult
from dollar_rates.ingestion.models import BankRate, BankRateLogEntry


class BackendStrategy(ABC):
    """Common interface implemented by every database backend."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create required tables/collections and verify connectivity."""

    @abstractmethod
    def upsert_latest(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        """Insert the bank's latest rate, or update it in place if present."""

    @abstractmethod
    def append_log(
        self,
        bank_class: str,
        bank_name: str,
        buy: float,
        sell: float,
        now: datetime,
    ) -> PersistenceResult:
        """Append one observation to the historical log."""

    @abstractmethod
    def get_latest(self, bank_class: str) -> BankRate | None:
        """Return the latest rate for ``bank_class`` if it was ever fetched."""

    @abstractmethod
    def list_latest(self) -> list[BankRate]:
        """Return every latest rate ordered by ``bank_class``."""

    @abstractmethod
    def fetch_log(self, bank_class: str | None = None) -> list[BankRateLogEntry]:
        """Return log entries ordered by ``created_at``."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["BackendStrategy"]
