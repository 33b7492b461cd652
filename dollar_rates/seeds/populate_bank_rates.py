"""Fetch every bank's dollar rate and persist the successful ones."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from typing import Callable, Sequence

import requests

from dollar_rates.db.base_backend import BackendStrategy
from dollar_rates.ingestion.coordinator import run_sources
from dollar_rates.ingestion.errors import StorageError, WriteError
from dollar_rates.ingestion.models import CycleReport, FetchOutcome, SourceConfig, WriteResult
from dollar_rates.utils.logger import configure_logging, get_logger

LOGGER = get_logger(__name__)

__all__ = ["apply_outcome", "update_all_rates", "parse_args", "main"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apply_outcome(
    backend: BackendStrategy,
    outcome: FetchOutcome,
    *,
    now: datetime | None = None,
) -> WriteResult:
    """Persist one outcome: upsert the latest row, then append to the log.

    Failed outcomes are skipped so a previously known-good rate is never
    overwritten. The two writes are not transactional; a partial write is
    corrected by the next successful cycle.
    """

    if not outcome.ok or outcome.rate is None:
        LOGGER.info("Skipping %s: %s", outcome.bank_class, outcome.error_detail)
        return WriteResult(bank_class=outcome.bank_class, skipped=True, error=outcome.error)

    rate = outcome.rate
    if rate.dollar_buy_rate > rate.dollar_sell_rate:
        LOGGER.warning(
            "%s buy rate %.2f exceeds sell rate %.2f",
            rate.bank_class,
            rate.dollar_buy_rate,
            rate.dollar_sell_rate,
        )
    timestamp = now or _utcnow()
    try:
        backend.upsert_latest(
            rate.bank_class,
            rate.bank_name,
            rate.dollar_buy_rate,
            rate.dollar_sell_rate,
            timestamp,
        )
        backend.append_log(
            rate.bank_class,
            rate.bank_name,
            rate.dollar_buy_rate,
            rate.dollar_sell_rate,
            timestamp,
        )
    except StorageError as exc:
        error = exc if isinstance(exc, WriteError) else WriteError(str(exc))
        LOGGER.error("Failed to update %s: %s", rate.bank_class, exc)
        return WriteResult(bank_class=rate.bank_class, error=error)
    LOGGER.info(
        "Updated %s: buy=%.2f sell=%.2f",
        rate.bank_class,
        rate.dollar_buy_rate,
        rate.dollar_sell_rate,
    )
    return WriteResult(bank_class=rate.bank_class, written=True)


def update_all_rates(
    backend: BackendStrategy,
    sources: Sequence[SourceConfig],
    *,
    session: requests.Session | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> CycleReport:
    """Run one cycle: concurrent fetch across ``sources``, then per-source writes."""

    outcomes = run_sources(sources, session=session)
    report = CycleReport(outcomes=outcomes)
    for outcome in outcomes:
        report.writes.append(apply_outcome(backend, outcome, now=clock()))
    LOGGER.info(
        "Cycle complete: updated=%s failed=%s",
        ",".join(report.updated) or "-",
        ",".join(report.failed) or "-",
    )
    return report


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--db",
        dest="db_url",
        default=None,
        help="Database URL (defaults to DATABASE_URL or the bundled SQLite file)",
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Keep running and refresh rates every UPDATE_INTERVAL_MINUTES",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    from dollar_rates import DollarRates
    from dollar_rates.config import Settings

    args = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    client = DollarRates(args.db_url or settings.database_url, settings=settings)
    try:
        if args.loop:
            client.run_forever()
        else:
            client.update()
    finally:
        client.close()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
