"""Read-only HTTP API over the latest-value table.

Usage:
    uvicorn dollar_rates.api:build_default_app --factory --host 0.0.0.0 --port 10000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI

from dollar_rates.db.base_backend import BackendStrategy
from dollar_rates.ingestion.errors import StorageError
from dollar_rates.scheduler import RateUpdater
from dollar_rates.utils.logger import configure_logging, get_logger

LOGGER = get_logger(__name__)

SERVICE_NAME = "dollar-rates"


def create_app(backend: BackendStrategy, *, updater: RateUpdater | None = None) -> FastAPI:
    """Build the API around ``backend``; ``updater`` is started with the app."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if updater is not None:
            LOGGER.info("Starting background rate updater")
            updater.start()
        try:
            yield
        finally:
            if updater is not None:
                updater.stop()

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)

    @app.get("/")
    def health() -> dict[str, Any]:
        return {"status": "ok", "service": SERVICE_NAME}

    @app.get("/rates")
    def get_rates() -> dict[str, Any]:
        try:
            rates = backend.list_latest()
        except StorageError as exc:
            LOGGER.error("Failed to list rates: %s", exc)
            return {"success": False, "error": str(exc)}
        return {"success": True, "data": [rate.to_dict() for rate in rates]}

    @app.get("/rates/{bank_class}")
    def get_rate_by_bank(bank_class: str) -> dict[str, Any]:
        try:
            rate = backend.get_latest(bank_class)
        except StorageError as exc:
            LOGGER.error("Failed to read %s: %s", bank_class, exc)
            return {"success": False, "error": str(exc)}
        if rate is None:
            return {"success": False, "message": f"Bank '{bank_class}' not found"}
        return {"success": True, "data": rate.to_dict()}

    return app


def build_default_app() -> FastAPI:
    """Wire the API, storage and updater from environment settings."""

    from dollar_rates import DollarRates
    from dollar_rates.config import Settings

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    client = DollarRates(settings.database_url, settings=settings)
    return create_app(client.get_backend(), updater=client.updater())


__all__ = ["create_app", "build_default_app", "SERVICE_NAME"]
