"""Logging helpers shared by every dollar_rates module."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PACKAGE_LOGGER = "dollar_rates"
# Third-party loggers that log every pooled connection at INFO.
NOISY_LOGGERS = ("urllib3", "pymongo")

_configured = False


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Return ``name``'s logger, installing the default handler on first use."""
    global _configured
    if not _configured:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _configured = True
    return logging.getLogger(name)


def configure_logging(level: str | int = logging.INFO) -> None:
    """Apply ``level`` to the package loggers and keep HTTP/DB clients at WARNING."""

    get_logger().setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["get_logger", "configure_logging", "LOG_FORMAT"]
