"""Data models shared across ingestion and persistence modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from dollar_rates.ingestion.extractors import RateExtractor
    from dollar_rates.ingestion.fetchers import RateFetcher


@dataclass(slots=True)
class FetchedRate:
    """Normalised buy/sell pair obtained from one bank."""

    bank_class: str
    bank_name: str
    dollar_buy_rate: float
    dollar_sell_rate: float


@dataclass(slots=True)
class BankRate:
    """Latest known rate for a bank (one row per ``bank_class``)."""

    bank_class: str
    bank_name: str
    dollar_buy_rate: float
    dollar_sell_rate: float
    updated_at: datetime | None = None
    created_at: datetime | None = None
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "bank_name": self.bank_name,
            "bank_class": self.bank_class,
            "dollar_buy_rate": self.dollar_buy_rate,
            "dollar_sell_rate": self.dollar_sell_rate,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(slots=True)
class BankRateLogEntry:
    """Historical observation; appended on every successful fetch."""

    bank_class: str
    bank_name: str
    dollar_buy_rate: float
    dollar_sell_rate: float
    created_at: datetime | None = None
    id: int | None = None


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Static descriptor pairing a bank with its fetch and extraction strategy."""

    bank_class: str
    bank_name: str
    fetcher: "RateFetcher"
    extractor: "RateExtractor"


@dataclass(slots=True)
class FetchOutcome:
    """Result of one source pipeline within a cycle."""

    bank_class: str
    rate: FetchedRate | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.rate is not None

    @property
    def error_detail(self) -> str | None:
        if self.error is None:
            return None
        return f"{type(self.error).__name__}: {self.error}"

    @classmethod
    def success(cls, rate: FetchedRate) -> "FetchOutcome":
        return cls(bank_class=rate.bank_class, rate=rate)

    @classmethod
    def failure(cls, bank_class: str, error: Exception) -> "FetchOutcome":
        return cls(bank_class=bank_class, error=error)


@dataclass(slots=True)
class WriteResult:
    """Outcome of applying one ``FetchOutcome`` to storage."""

    bank_class: str
    written: bool = False
    skipped: bool = False
    error: Exception | None = None


@dataclass(slots=True)
class CycleReport:
    """Aggregated view of one cycle, used for logging only."""

    outcomes: list[FetchOutcome] = field(default_factory=list)
    writes: list[WriteResult] = field(default_factory=list)

    @property
    def updated(self) -> list[str]:
        return [result.bank_class for result in self.writes if result.written]

    @property
    def failed(self) -> list[str]:
        return [result.bank_class for result in self.writes if not result.written]


__all__ = [
    "FetchedRate",
    "BankRate",
    "BankRateLogEntry",
    "SourceConfig",
    "FetchOutcome",
    "WriteResult",
    "CycleReport",
]
