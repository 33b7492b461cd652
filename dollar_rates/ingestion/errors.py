"""Error taxonomy for rate acquisition and persistence."""

from __future__ import annotations


class RateSourceError(Exception):
    """Base class for anything that stops one source from yielding a rate."""


class FetchError(RateSourceError):
    """Network unreachable, timeout, or a non-success HTTP status."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class ExtractionError(RateSourceError):
    """The fetched document did not yield a usable buy/sell pair."""


class PatternNotFound(ExtractionError):
    """The bank-specific pattern is absent from the document."""


class ParseError(ExtractionError):
    """Matched text is not a finite, strictly positive number."""


class MissingField(ExtractionError):
    """A JSON path expected to hold a rate is absent."""


class TypeMismatch(ExtractionError):
    """A JSON path is present but does not hold a number."""


class MalformedDocument(ExtractionError):
    """The payload could not be decoded at all (e.g. a bot challenge page)."""


class StorageError(Exception):
    """Storage was unavailable or failed a query."""


class WriteError(StorageError):
    """Storage was unavailable or rejected a write."""


__all__ = [
    "RateSourceError",
    "FetchError",
    "ExtractionError",
    "PatternNotFound",
    "ParseError",
    "MissingField",
    "TypeMismatch",
    "MalformedDocument",
    "StorageError",
    "WriteError",
]
