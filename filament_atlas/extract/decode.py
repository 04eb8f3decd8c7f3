"""Locate the list of raw product records inside an API response."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ..crawl.fetch import loads_lenient

logger = logging.getLogger(__name__)

CONTAINER_KEYS: tuple[str, ...] = ("data", "products", "items")
PRODUCT_MARKER_KEYS: tuple[str, ...] = (
    "product_name",
    "name",
    "hex_code",
    "hex",
    "color_name",
)


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """Outcome of a decode attempt."""

    records: list[Any] | None
    source: str

    @property
    def found(self) -> bool:
        return self.records is not None


NOT_FOUND = DecodeResult(None, "not-found")

Probe = Callable[[Any], DecodeResult]


def _probe_array(payload: Any) -> DecodeResult:
    if isinstance(payload, list):
        return DecodeResult(payload, "array")
    return NOT_FOUND


def _probe_container_keys(payload: Any) -> DecodeResult:
    if not isinstance(payload, Mapping):
        return NOT_FOUND
    for key in CONTAINER_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return DecodeResult(value, f"key:{key}")
    return NOT_FOUND


def _probe_record_map(payload: Any) -> DecodeResult:
    """Treat ``{"0": {...}, "1": {...}}`` style payloads as a record list."""
    if not isinstance(payload, Mapping) or not payload:
        return NOT_FOUND
    values = list(payload.values())
    first = values[0]
    if not isinstance(first, Mapping):
        return NOT_FOUND
    if any(first.get(key) for key in PRODUCT_MARKER_KEYS):
        return DecodeResult(values, "values")
    return NOT_FOUND


_PROBES: tuple[Probe, ...] = (_probe_array, _probe_container_keys, _probe_record_map)


def find_record_list(payload: Any) -> DecodeResult:
    """Return the first record list found in *payload* by the ordered probes."""
    if isinstance(payload, (str, bytes)):
        text = payload.decode("utf-8", "replace") if isinstance(payload, bytes) else payload
        try:
            payload = loads_lenient(text)
        except ValueError:
            logger.debug("Response body is text and not JSON")
            return NOT_FOUND
    for probe in _PROBES:
        result = probe(payload)
        if result.found:
            return result
    return NOT_FOUND
