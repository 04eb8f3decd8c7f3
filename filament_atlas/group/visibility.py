"""Filter the catalog down to the ids a viewer should see."""

from __future__ import annotations

from collections import Counter
from typing import Collection, Dict, Iterable

from ..io.models import CatalogEntry


def visible_ids(
    entries: Iterable[CatalogEntry],
    categories: Collection[str],
    query: str = "",
) -> set[str]:
    """Return ids of entries in *categories* that match *query*.

    An empty category selection hides everything. The query is matched
    case-insensitively against product, colour name and category.
    """
    if not categories:
        return set()
    selected = {str(category) for category in categories}
    needle = (query or "").strip().lower()
    result: set[str] = set()
    for entry in entries:
        if entry.category.value not in selected:
            continue
        if needle and not any(
            needle in field.lower()
            for field in (entry.product, entry.name, entry.category.value)
        ):
            continue
        result.add(entry.id)
    return result


def category_counts(entries: Iterable[CatalogEntry]) -> Dict[str, int]:
    """Return entry counts per category, sorted by category name."""
    counts = Counter(entry.category.value for entry in entries)
    return {category: counts[category] for category in sorted(counts)}
