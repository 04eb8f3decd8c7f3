"""Map heterogeneous raw product records onto catalog entries."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Iterator, Mapping

from ..features.color import is_valid_hex
from ..io.models import CatalogEntry
from .classify import classify_category

logger = logging.getLogger(__name__)

FALLBACK_URL = "https://us.polymaker.com"

# The upstream API has renamed most of its fields over time; the first
# non-empty alias wins.
PRODUCT_KEYS = ("product_name", "product", "title")
NAME_KEYS = ("color_name", "name", "color")
CATEGORY_KEYS = ("material", "material_type", "category", "type")
URL_KEYS = ("product_url", "url", "link")
HEX_KEYS = ("hex_code", "hex", "hexcodes", "color_hex", "color_code", "value")
TD_KEYS = ("transmission_distance", "td")

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def slug(value: str) -> str:
    """Lowercase *value* and drop everything that is not ``[a-z0-9]``."""
    return _NON_ALNUM.sub("", value.lower())


def as_text(value: Any) -> str:
    """Render a JSON scalar the way the catalog's JavaScript clients print it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first truthy value among *keys* in *record*."""
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None


def resolve_transmission_distance(record: Mapping[str, Any]) -> str | None:
    for key in TD_KEYS:
        value = record.get(key)
        if value is None or value == "":
            continue
        text = as_text(value)
        return None if text == "null" else text
    return None


def resolve_hex(record: Mapping[str, Any]) -> str | None:
    """Return the record's hex as ``#xxxxxx`` text, or ``None`` if unusable."""
    raw = first_present(record, HEX_KEYS)
    if raw is None:
        return None
    value = as_text(raw).strip()
    if not value.startswith("#"):
        value = f"#{value}"
    return value if is_valid_hex(value) else None


class RecordNormalizer:
    """Normalize records in source order, dropping duplicate ids."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    @property
    def seen_ids(self) -> frozenset[str]:
        return frozenset(self._seen)

    def normalize(self, record: Any) -> CatalogEntry | None:
        """Return an entry for *record*, or ``None`` when it is skipped."""
        if not isinstance(record, Mapping):
            return None

        product = as_text(first_present(record, PRODUCT_KEYS) or "Unknown Product")
        name = as_text(first_present(record, NAME_KEYS) or "Unknown Color")
        raw_category = as_text(first_present(record, CATEGORY_KEYS) or "")
        url = as_text(first_present(record, URL_KEYS) or FALLBACK_URL)

        hex_value = resolve_hex(record)
        if hex_value is None:
            logger.debug("Skipping %s / %s: no valid hex", product, name)
            return None

        source_id = record.get("id")
        entry_id = as_text(source_id) if source_id else f"{slug(product)}-{slug(name)}"
        if entry_id in self._seen:
            return None
        self._seen.add(entry_id)

        return CatalogEntry(
            id=entry_id,
            product=product,
            name=name,
            category=classify_category(raw_category, product),
            hex=hex_value,
            url=url,
            transmission_distance=resolve_transmission_distance(record),
        )

    def iter_entries(self, records: Iterable[Any]) -> Iterator[CatalogEntry]:
        for record in records:
            entry = self.normalize(record)
            if entry is not None:
                yield entry


def normalize_records(records: Iterable[Any]) -> list[CatalogEntry]:
    """Normalize *records* with a fresh dedup set."""
    return list(RecordNormalizer().iter_entries(records))
