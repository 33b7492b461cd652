"""Serve the read API and keep rates fresh in the background."""

from __future__ import annotations

import uvicorn

from dollar_rates.api import build_default_app
from dollar_rates.config import Settings


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run(build_default_app(), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
