"""Shared fixtures: an in-memory stand-in for ``requests.Session``."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from dollar_rates.db.sqlite_backend import SQLiteBackend


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code


class FakeSession:
    """Answers GETs from a URL routing table.

    A route is a body string, a ``(status_code, body)`` tuple, an exception to
    raise, or a zero-argument callable returning one of those.
    """

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, *, headers: dict[str, str] | None = None, timeout: float | None = None):
        self.calls.append({"url": url, "headers": headers or {}, "timeout": timeout})
        if url not in self.routes:
            return FakeResponse("not found", status_code=404)
        route = self.routes[url]
        if callable(route):
            route = route()
        if isinstance(route, Exception):
            raise route
        if isinstance(route, tuple):
            status_code, body = route
            return FakeResponse(body, status_code=status_code)
        return FakeResponse(str(route))

    def close(self) -> None:
        return None

    @property
    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


@pytest.fixture
def make_session() -> Callable[[dict[str, Any]], FakeSession]:
    return FakeSession


@pytest.fixture
def sqlite_backend(tmp_path: Path):
    backend = SQLiteBackend(db_path=tmp_path / "rates.db")
    backend.ensure_schema()
    yield backend
    backend.close()
