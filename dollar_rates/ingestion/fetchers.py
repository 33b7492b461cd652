"""Network strategies that retrieve the raw document for one bank."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import urlsplit

import requests

from dollar_rates.ingestion.errors import FetchError
from dollar_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)
BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/145.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.7",
    "Accept-Language": "en-US,en;q=0.9,es-US;q=0.8,es;q=0.7",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}


class RateFetcher(Protocol):
    """Contract for retrieving the document a bank publishes its rates in."""

    def fetch(self, session: requests.Session) -> str:
        ...  # pragma: no cover - protocol definition


def _get(
    session: requests.Session,
    url: str,
    *,
    headers: dict[str, str],
    timeout: float,
) -> requests.Response:
    try:
        response = session.get(url, headers=headers, timeout=timeout)
    except requests.Timeout as exc:
        raise FetchError(f"timed out after {timeout:.0f}s fetching {url}", url=url) from exc
    except requests.RequestException as exc:
        raise FetchError(f"request to {url} failed: {exc}", url=url) from exc
    return response


def _body_or_raise(response: requests.Response, url: str) -> str:
    if not 200 <= response.status_code < 300:
        raise FetchError(
            f"{url} responded with HTTP {response.status_code}",
            url=url,
            status=response.status_code,
        )
    return response.text


@dataclass(frozen=True)
class DirectFetcher:
    """Plain GET against the bank's published endpoint."""

    url: str
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    headers: dict[str, str] = field(default_factory=lambda: {"User-Agent": USER_AGENT})

    def fetch(self, session: requests.Session) -> str:
        response = _get(session, self.url, headers=dict(self.headers), timeout=self.timeout)
        return _body_or_raise(response, self.url)


@dataclass(frozen=True)
class ProxiedFetcher:
    """GET routed through an optional forward proxy.

    The upstream sits behind a bot-mitigation layer, so a proxy URL can be
    supplied to relay the request. By default the upstream path and query
    string are appended to the proxy base; with ``append_upstream_path`` off
    the proxy URL is requested exactly as configured. Without a proxy, or
    when the proxy answers with a non-2xx status, the upstream is requested
    directly with browser-like headers; a challenge page then surfaces as an
    ordinary fetch or extraction error.
    """

    upstream_url: str
    proxy_base_url: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    accept: str | None = None
    append_upstream_path: bool = True

    def proxied_url(self) -> str | None:
        if not self.proxy_base_url:
            return None
        if not self.append_upstream_path:
            return self.proxy_base_url
        parts = urlsplit(self.upstream_url)
        target = self.proxy_base_url.rstrip("/") + (parts.path or "/")
        if parts.query:
            target = f"{target}?{parts.query}"
        return target

    def _headers(self, base: dict[str, str]) -> dict[str, str]:
        headers = dict(base)
        if self.accept:
            headers["Accept"] = self.accept
        return headers

    def fetch(self, session: requests.Session) -> str:
        proxied = self.proxied_url()
        if proxied is not None:
            LOGGER.info("Fetching %s via proxy", self.upstream_url)
            response = _get(
                session,
                proxied,
                headers=self._headers({"User-Agent": USER_AGENT}),
                timeout=self.timeout,
            )
            if 200 <= response.status_code < 300:
                return response.text
            LOGGER.warning(
                "Proxy returned HTTP %s for %s, falling back to direct access",
                response.status_code,
                self.upstream_url,
            )
        response = _get(
            session,
            self.upstream_url,
            headers=self._headers(BROWSER_HEADERS),
            timeout=self.timeout,
        )
        return _body_or_raise(response, self.upstream_url)


@dataclass(frozen=True)
class StaticFetcher:
    """No network access; the extractor supplies the rate on its own."""

    def fetch(self, session: requests.Session) -> str:
        return ""


__all__ = [
    "RateFetcher",
    "DEFAULT_TIMEOUT_SECONDS",
    "USER_AGENT",
    "BROWSER_HEADERS",
    "DirectFetcher",
    "ProxiedFetcher",
    "StaticFetcher",
]
