"""Per-bank source descriptors."""

from __future__ import annotations

from dollar_rates.config import Settings
from dollar_rates.ingestion.extractors import (
    HtmlPatternExtractor,
    JsonFieldExtractor,
    StaticRateExtractor,
    XmlTagExtractor,
)
from dollar_rates.ingestion.fetchers import (
    DEFAULT_TIMEOUT_SECONDS,
    DirectFetcher,
    ProxiedFetcher,
    StaticFetcher,
)
from dollar_rates.ingestion.models import SourceConfig

BANRESERVAS_URL = "https://www.banreservas.com/calculadoras/"
BHD_API_URL = "https://backend.bhd.com.do/api/modal-cambio-rate?populate=deep"
POPULAR_API_URL = (
    "https://popularenlinea.com/_api/web/lists/getbytitle('Rates')/items"
    "?$filter=ItemID%20eq%20%271%27"
)

# Provisional until Popular's feed can be reached without a relay.
POPULAR_STATIC_RATES = (58.54, 59.02)

BHD_USD = {"currency": "USD"}


def banreservas_source(*, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> SourceConfig:
    return SourceConfig(
        bank_class="banreservas",
        bank_name="Banreservas",
        fetcher=DirectFetcher(BANRESERVAS_URL, timeout=timeout),
        extractor=HtmlPatternExtractor(),
    )


def bhd_source(
    *, proxy_base_url: str | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> SourceConfig:
    return SourceConfig(
        bank_class="bhd",
        bank_name="BHD",
        fetcher=ProxiedFetcher(
            BHD_API_URL,
            proxy_base_url=proxy_base_url,
            timeout=timeout,
            accept="application/json",
        ),
        extractor=JsonFieldExtractor(
            buy_path=("data", "attributes", "exchangeRates", BHD_USD, "buyingRate"),
            sell_path=("data", "attributes", "exchangeRates", BHD_USD, "sellingRate"),
        ),
    )


def popular_source(
    *, proxy_base_url: str | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> SourceConfig:
    """Banco Popular: SharePoint XML feed when a relay is configured, else static."""

    if proxy_base_url:
        return SourceConfig(
            bank_class="popular",
            bank_name="Banco Popular",
            fetcher=ProxiedFetcher(
                POPULAR_API_URL,
                proxy_base_url=proxy_base_url,
                timeout=timeout,
                accept="application/xml",
                append_upstream_path=False,
            ),
            extractor=XmlTagExtractor(),
        )
    buy, sell = POPULAR_STATIC_RATES
    return SourceConfig(
        bank_class="popular",
        bank_name="Banco Popular",
        fetcher=StaticFetcher(),
        extractor=StaticRateExtractor(buy=buy, sell=sell),
    )


def default_sources(settings: Settings | None = None) -> list[SourceConfig]:
    """Return the configured bank sources in a stable order."""

    settings = settings or Settings.from_env()
    return [
        banreservas_source(timeout=settings.fetch_timeout_seconds),
        bhd_source(proxy_base_url=settings.bhd_proxy_url, timeout=settings.fetch_timeout_seconds),
        popular_source(proxy_base_url=settings.popular_proxy_url, timeout=settings.fetch_timeout_seconds),
    ]


__all__ = [
    "BANRESERVAS_URL",
    "BHD_API_URL",
    "POPULAR_API_URL",
    "POPULAR_STATIC_RATES",
    "banreservas_source",
    "bhd_source",
    "popular_source",
    "default_sources",
]
