"""Concurrent fan-out across all configured rate sources."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

import requests

from dollar_rates.ingestion.errors import RateSourceError
from dollar_rates.ingestion.models import FetchedRate, FetchOutcome, SourceConfig
from dollar_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


def run_source(source: SourceConfig, session: requests.Session) -> FetchOutcome:
    """Fetch and extract one source, converting every error into a failed outcome."""

    try:
        document = source.fetcher.fetch(session)
        buy, sell = source.extractor.extract(document)
    except RateSourceError as exc:
        LOGGER.error("%s: %s", source.bank_name, exc)
        return FetchOutcome.failure(source.bank_class, exc)
    except Exception as exc:
        LOGGER.exception("%s: unexpected failure", source.bank_name)
        return FetchOutcome.failure(source.bank_class, exc)
    LOGGER.info("%s: buy=%.2f sell=%.2f", source.bank_name, buy, sell)
    return FetchOutcome.success(
        FetchedRate(
            bank_class=source.bank_class,
            bank_name=source.bank_name,
            dollar_buy_rate=buy,
            dollar_sell_rate=sell,
        )
    )


def run_sources(
    sources: Sequence[SourceConfig],
    *,
    session: requests.Session | None = None,
    max_workers: int | None = None,
) -> list[FetchOutcome]:
    """Run every source pipeline concurrently and wait for all of them.

    Each source gets its own worker so a slow upstream only delays the join.
    Outcomes are returned in the order of ``sources``; one source failing
    never prevents the others from completing. Without an injected
    ``session`` every source opens and closes a session of its own.
    """

    if not sources:
        return []
    run = run_source if session is not None else _run_source_in_own_session
    with ThreadPoolExecutor(
        max_workers=max_workers or len(sources), thread_name_prefix="rate-source"
    ) as executor:
        futures = [executor.submit(run, source, session) for source in sources]
        return [future.result() for future in futures]


def _run_source_in_own_session(source: SourceConfig, _: None) -> FetchOutcome:
    with requests.Session() as session:
        return run_source(source, session)


__all__ = ["run_source", "run_sources"]
