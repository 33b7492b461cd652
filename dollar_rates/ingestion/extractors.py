"""Extraction strategies turning a fetched document into a buy/sell pair."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence, Union

from bs4 import BeautifulSoup

from dollar_rates.ingestion.errors import (
    MalformedDocument,
    MissingField,
    ParseError,
    PatternNotFound,
    TypeMismatch,
)

RatePair = tuple[float, float]
PathElement = Union[str, int, Mapping[str, Any]]

COMPRA_VENTA_PATTERN = r"Compra\s*(-?\d+\.\d+).*?Venta\s*(-?\d+\.\d+)"


class RateExtractor(Protocol):
    """Contract shared by every extraction strategy."""

    def extract(self, document: str) -> RatePair:
        ...  # pragma: no cover - protocol definition


def validate_rate(value: object, label: str) -> float:
    """Coerce ``value`` to a finite, strictly positive float or raise ``ParseError``."""

    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ParseError(f"{label} rate {value!r} is not a number") from exc
    if not math.isfinite(number) or number <= 0:
        raise ParseError(f"{label} rate {value!r} must be finite and positive")
    return number


def _document_text(document: str) -> str:
    soup = BeautifulSoup(document, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return " ".join(soup.stripped_strings)


@dataclass(frozen=True)
class HtmlPatternExtractor:
    """Scrape buy/sell figures that follow labels such as ``Compra``/``Venta``.

    The markup is flattened to its visible text first so that tags, entities
    and line breaks between the label and the number do not matter. The raw
    document is tried as a fallback because some pages render the rates only
    inside inline scripts.
    """

    pattern: str = COMPRA_VENTA_PATTERN

    def extract(self, document: str) -> RatePair:
        regex = re.compile(self.pattern, re.DOTALL | re.IGNORECASE)
        match = regex.search(_document_text(document)) or regex.search(document)
        if match is None:
            raise PatternNotFound(f"pattern {self.pattern!r} not found in document")
        return validate_rate(match.group(1), "buy"), validate_rate(match.group(2), "sell")


def _follow_path(payload: Any, path: Sequence[PathElement]) -> Any:
    current = payload
    walked: list[str] = []
    for element in path:
        walked.append(str(element))
        location = "/".join(walked)
        if isinstance(element, Mapping):
            if not isinstance(current, list):
                raise MissingField(f"expected a list at {location}")
            current = next(
                (
                    item
                    for item in current
                    if isinstance(item, Mapping)
                    and all(item.get(key) == value for key, value in element.items())
                ),
                None,
            )
            if current is None:
                raise MissingField(f"no entry matching {dict(element)} at {location}")
        elif isinstance(element, int):
            if not isinstance(current, list) or not -len(current) <= element < len(current):
                raise MissingField(f"index missing at {location}")
            current = current[element]
        else:
            if not isinstance(current, Mapping) or element not in current:
                raise MissingField(f"field missing at {location}")
            current = current[element]
    return current


def _numeric_field(payload: Any, path: Sequence[PathElement], label: str) -> float:
    value = _follow_path(payload, path)
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeMismatch(f"{label} field holds {type(value).__name__}, expected a number")
    if isinstance(value, str):
        try:
            float(value)
        except ValueError as exc:
            raise TypeMismatch(f"{label} field holds non-numeric text {value!r}") from exc
    return validate_rate(value, label)


@dataclass(frozen=True)
class JsonFieldExtractor:
    """Read two numeric fields at known paths of a JSON payload.

    Path elements are mapping keys, list indexes, or selector mappings that
    pick the first list entry whose items match (``{"currency": "USD"}``).
    """

    buy_path: tuple[PathElement, ...] = ("buy",)
    sell_path: tuple[PathElement, ...] = ("sell",)

    def extract(self, document: str) -> RatePair:
        try:
            payload = json.loads(document)
        except (TypeError, ValueError) as exc:
            snippet = (document or "")[:80].replace("\n", " ")
            raise MalformedDocument(f"payload is not JSON: {snippet!r}") from exc
        return (
            _numeric_field(payload, self.buy_path, "buy"),
            _numeric_field(payload, self.sell_path, "sell"),
        )


@dataclass(frozen=True)
class XmlTagExtractor:
    """Read rates from OData XML elements such as ``<d:DollarBuyRate>``."""

    buy_tag: str = "d:DollarBuyRate"
    sell_tag: str = "d:DollarSellRate"

    def _tag_value(self, document: str, tag: str) -> str:
        match = re.search(rf"<{re.escape(tag)}[^>]*>\s*([^<]*?)\s*</{re.escape(tag)}>", document)
        if match is None:
            raise PatternNotFound(f"<{tag}> not found in XML")
        return match.group(1)

    def extract(self, document: str) -> RatePair:
        buy = validate_rate(self._tag_value(document, self.buy_tag), "buy")
        sell = validate_rate(self._tag_value(document, self.sell_tag), "sell")
        return buy, sell


@dataclass(frozen=True)
class StaticRateExtractor:
    """Return a fixed pair; a placeholder until the bank exposes a usable feed."""

    buy: float
    sell: float

    def __post_init__(self) -> None:
        validate_rate(self.buy, "buy")
        validate_rate(self.sell, "sell")

    def extract(self, document: str) -> RatePair:
        return self.buy, self.sell


__all__ = [
    "RateExtractor",
    "RatePair",
    "COMPRA_VENTA_PATTERN",
    "validate_rate",
    "HtmlPatternExtractor",
    "JsonFieldExtractor",
    "XmlTagExtractor",
    "StaticRateExtractor",
]
