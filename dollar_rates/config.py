"""Process configuration loaded from environment variables."""

from __future__ import annotations

from typing import Any, Literal, Mapping, Optional

from pydantic import PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dollar_rates.ingestion.fetchers import DEFAULT_TIMEOUT_SECONDS

DEFAULT_UPDATE_INTERVAL_MINUTES = 30
DEFAULT_PORT = 10000
DEFAULT_LOG_LEVEL = "INFO"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Runtime settings shared by the updater, the API and the CLI.

    Each field is read from the upper-cased environment variable of the same
    name (``DATABASE_URL``, ``BHD_PROXY_URL``, ``POPULAR_PROXY_URL``,
    ``FETCH_TIMEOUT_SECONDS``, ``UPDATE_INTERVAL_MINUTES``, ``PORT`` and
    ``LOG_LEVEL``). Blank variables fall back to the defaults.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        case_sensitive=False,
        env_ignore_empty=True,
    )

    database_url: Optional[str] = None
    bhd_proxy_url: Optional[str] = None
    popular_proxy_url: Optional[str] = None
    fetch_timeout_seconds: PositiveFloat = DEFAULT_TIMEOUT_SECONDS
    update_interval_minutes: PositiveFloat = DEFAULT_UPDATE_INTERVAL_MINUTES
    port: PositiveInt = DEFAULT_PORT
    log_level: LogLevel = DEFAULT_LOG_LEVEL

    @field_validator("database_url", "bhd_proxy_url", "popular_proxy_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``environ``, or from the process environment when omitted."""

        if environ is None:
            return cls()
        # Every field is passed explicitly so the process environment cannot leak in.
        values: dict[str, Any] = {name: field.default for name, field in cls.model_fields.items()}
        values.update(
            (key.lower(), value)
            for key, value in environ.items()
            if key.lower() in values and value.strip()
        )
        return cls.model_validate(values)


__all__ = [
    "Settings",
    "LogLevel",
    "DEFAULT_UPDATE_INTERVAL_MINUTES",
    "DEFAULT_PORT",
    "DEFAULT_LOG_LEVEL",
]
